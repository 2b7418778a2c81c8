"""Configuration editing helpers used by the session workflow.

All functions return new `AgentConfig` objects; the input is never mutated.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .models import AgentConfig, AgentTemplate, ModelName

GEMINI_HINTS = ("gemini", "google")
MISTRAL_HINTS = ("mistral",)

OUTPUT_EXTENSIONS = {
    "typescript": "ts",
}
OUTPUT_TITLES = {
    "typescript": "TypeScript",
}
MODEL_TITLES = {
    "gemini": "Gemini",
    "mistral": "Mistral",
}


def detect_model_from_tasks(tasks: list[str], current: ModelName) -> ModelName:
    """Pick the model a task list mentions, when it mentions exactly one."""
    if not tasks:
        return current
    lowered = [task.lower() for task in tasks]
    mentions_gemini = any(hint in task for task in lowered for hint in GEMINI_HINTS)
    mentions_mistral = any(hint in task for task in lowered for hint in MISTRAL_HINTS)
    if mentions_gemini and not mentions_mistral:
        return "gemini"
    if mentions_mistral and not mentions_gemini:
        return "mistral"
    return current


def with_tasks(config: AgentConfig, tasks: list[str]) -> AgentConfig:
    model = detect_model_from_tasks(tasks, config.model)
    return config.model_copy(update={"tasks": list(tasks), "model": model})


def add_task(config: AgentConfig, task: str) -> AgentConfig:
    text = (task or "").strip()
    if not text:
        return config
    return with_tasks(config, [*config.tasks, text])


def remove_task(config: AgentConfig, index: int) -> AgentConfig:
    if index < 0 or index >= len(config.tasks):
        raise IndexError(f"Task index {index} out of range")
    tasks = list(config.tasks)
    del tasks[index]
    return with_tasks(config, tasks)


def apply_template(config: AgentConfig, template: AgentTemplate) -> AgentConfig:
    """Merge a template's defaults into the config.

    The user's name and description win when set; template customization
    values override the user's, field by field.
    """
    updates: dict = {
        "name": config.name or template.name,
        "description": config.description or template.description,
        "template": template.id,
    }
    defaults = template.config
    if defaults.model is not None:
        updates["model"] = defaults.model
    if defaults.worker_count is not None:
        updates["worker_count"] = defaults.worker_count
    if defaults.customization is not None:
        overrides = defaults.customization.model_dump(exclude_none=True)
        updates["customization"] = config.customization.model_copy(update=overrides)
    return config.model_copy(update=updates)


def to_fixed(value: float, places: int) -> str:
    """Fixed-point text with ties rounded away from zero, like `Number.toFixed`."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def download_filename(config: AgentConfig) -> str:
    extension = OUTPUT_EXTENSIONS.get(config.output_format, "txt")
    return f"agent.{extension}"


def preview_summary(config: AgentConfig) -> dict:
    customization = config.customization
    features = []
    badges = [
        f"{MODEL_TITLES.get(config.model, config.model)} Model",
        f"{config.worker_count} Workers",
        f"{OUTPUT_TITLES.get(config.output_format, config.output_format)} Output",
        f"Temp: {to_fixed(customization.temperature, 1)}",
        f"Max Tokens: {customization.max_tokens}",
    ]
    if customization.use_tools:
        badges.append("Uses Tools")
        features.append({"name": "Tools", "detail": "Agent can use external tools and APIs"})
    if customization.use_memory:
        badges.append("Uses Memory")
        features.append({"name": "Memory", "detail": "Agent remembers previous interactions"})
    if customization.use_retrieval:
        badges.append("Uses Retrieval")
        features.append({"name": "Retrieval", "detail": "Agent can search through documents"})
    if config.template:
        badges.append("From Template")

    return {
        "configured": bool(config.name or config.description),
        "title": config.name or "Unnamed Agent",
        "description": config.description or "No description provided",
        "badges": badges,
        "tasks": list(config.tasks),
        "workers": [f"Worker {i + 1}" for i in range(config.worker_count)],
        "manager": "Manager Agent",
        "features": features,
    }

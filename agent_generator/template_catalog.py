"""Built-in agent templates.

Each template pairs a partial configuration with a literal LlamaIndex
TypeScript body. Bodies live as `.ts` files under `template_code/` so they can
be read and diffed as source; the metadata lives here. The catalog is built
once at import time and never mutated afterwards.
"""

from __future__ import annotations

from typing import Optional

from .models import AgentTemplate, TemplateConfig, TemplateCustomization
from .runtime_config import TEMPLATE_CODE_DIR

_TEMPLATE_META: list[dict] = [
    {
        "id": "rag-agent",
        "name": "RAG Agent",
        "description": "Retrieval-Augmented Generation agent that can search and use documents",
        "config": {
            "model": "gemini",
            "worker_count": 2,
            "customization": {
                "temperature": 0.7,
                "max_tokens": 1000,
                "use_tools": True,
                "use_memory": False,
                "use_retrieval": True,
            },
        },
    },
    {
        "id": "chat-agent",
        "name": "Chat Agent",
        "description": "Conversational agent with memory for ongoing discussions",
        "config": {
            "model": "mistral",
            "worker_count": 1,
            "customization": {
                "temperature": 0.8,
                "max_tokens": 2000,
                "use_tools": False,
                "use_memory": True,
                "use_retrieval": False,
            },
        },
    },
    {
        "id": "tool-agent",
        "name": "Tool-using Agent",
        "description": "Agent that can use external tools and APIs to accomplish tasks",
        "config": {
            "model": "gemini",
            "worker_count": 3,
            "customization": {
                "temperature": 0.5,
                "max_tokens": 1500,
                "use_tools": True,
                "use_memory": False,
                "use_retrieval": False,
            },
        },
    },
    {
        "id": "multi-modal-agent",
        "name": "Multi-Modal Agent",
        "description": "Agent that can process both text and image inputs",
        "config": {
            "model": "gemini",
            "worker_count": 2,
            "customization": {
                "temperature": 0.6,
                "max_tokens": 2000,
                "use_tools": True,
                "use_memory": False,
                "use_retrieval": True,
            },
        },
    },
    {
        "id": "reasoning-agent",
        "name": "Reasoning Agent",
        "description": "Agent with advanced reasoning capabilities for complex problem-solving",
        "config": {
            "model": "mistral",
            "worker_count": 4,
            "customization": {
                "temperature": 0.3,
                "max_tokens": 3000,
                "use_tools": True,
                "use_memory": True,
                "use_retrieval": True,
            },
        },
    },
]


def _read_code(template_id: str) -> str:
    path = TEMPLATE_CODE_DIR / f"{template_id}.ts"
    text = path.read_text(encoding="utf-8")
    # Bodies are stored with a trailing newline; the catalog code does not end with one.
    return text[:-1] if text.endswith("\n") else text


def _build_template(meta: dict) -> AgentTemplate:
    raw_config = dict(meta.get("config") or {})
    customization = raw_config.pop("customization", None)
    config = TemplateConfig(
        **raw_config,
        customization=TemplateCustomization(**customization) if customization else None,
    )
    return AgentTemplate(
        id=meta["id"],
        name=meta["name"],
        description=meta["description"],
        config=config,
        code=_read_code(meta["id"]),
    )


def _load_templates() -> tuple[AgentTemplate, ...]:
    return tuple(_build_template(meta) for meta in _TEMPLATE_META)


TEMPLATES: tuple[AgentTemplate, ...] = _load_templates()


def get_template(template_id: Optional[str]) -> Optional[AgentTemplate]:
    target = (template_id or "").strip()
    if not target:
        return None
    for template in TEMPLATES:
        if template.id == target:
            return template
    return None


def list_templates() -> list[dict]:
    """Return summary list of all templates."""
    return [
        {
            "id": t.id,
            "name": t.name,
            "description": t.description,
            "config": t.config,
        }
        for t in TEMPLATES
    ]

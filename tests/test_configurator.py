import pytest

from agent_generator import configurator
from agent_generator.models import AgentConfig, AgentCustomization
from agent_generator.template_catalog import get_template


def test_add_task_trims_and_ignores_blank():
    config = AgentConfig()
    config = configurator.add_task(config, "  Summarize  ")
    config = configurator.add_task(config, "   ")
    config = configurator.add_task(config, "Summarize")

    assert config.tasks == ["Summarize", "Summarize"]


def test_remove_task_by_index():
    config = AgentConfig(tasks=["a", "b", "c"])
    assert configurator.remove_task(config, 1).tasks == ["a", "c"]
    assert config.tasks == ["a", "b", "c"]

    with pytest.raises(IndexError):
        configurator.remove_task(config, 3)
    with pytest.raises(IndexError):
        configurator.remove_task(config, -1)


def test_model_detected_from_task_mentions():
    assert configurator.detect_model_from_tasks(["Ask Gemini for a summary"], "mistral") == "gemini"
    assert configurator.detect_model_from_tasks(["Use google search"], "mistral") == "gemini"
    assert configurator.detect_model_from_tasks(["Route to MISTRAL"], "gemini") == "mistral"
    assert configurator.detect_model_from_tasks(["gemini vs mistral"], "gemini") == "gemini"
    assert configurator.detect_model_from_tasks(["gemini vs mistral"], "mistral") == "mistral"
    assert configurator.detect_model_from_tasks(["plain task"], "gemini") == "gemini"
    assert configurator.detect_model_from_tasks([], "mistral") == "mistral"


def test_adding_task_switches_model():
    config = configurator.add_task(AgentConfig(model="mistral"), "Summarize with Gemini")
    assert config.model == "gemini"


def test_apply_template_prefers_user_name_and_description():
    template = get_template("chat-agent")
    config = AgentConfig(
        name="Support Bot",
        description="",
        model="gemini",
        worker_count=5,
        tasks=["Greet"],
        customization=AgentCustomization(temperature=0.1, max_tokens=500, use_tools=True),
    )
    merged = configurator.apply_template(config, template)

    assert merged.name == "Support Bot"
    assert merged.description == template.description
    assert merged.template == "chat-agent"
    assert merged.model == "mistral"
    assert merged.worker_count == 1
    assert merged.tasks == ["Greet"]
    assert merged.customization.temperature == 0.8
    assert merged.customization.max_tokens == 2000
    assert merged.customization.use_tools is False
    assert merged.customization.use_memory is True


def test_apply_template_fills_empty_name():
    merged = configurator.apply_template(AgentConfig(), get_template("rag-agent"))
    assert merged.name == "RAG Agent"


def test_preview_summary():
    config = AgentConfig(
        name="Helper",
        model="gemini",
        worker_count=3,
        tasks=["One"],
        template="rag-agent",
        customization=AgentCustomization(temperature=0.7, max_tokens=1500, use_memory=True),
    )
    preview = configurator.preview_summary(config)

    assert preview["configured"] is True
    assert preview["title"] == "Helper"
    assert preview["description"] == "No description provided"
    assert preview["badges"] == [
        "Gemini Model",
        "3 Workers",
        "TypeScript Output",
        "Temp: 0.7",
        "Max Tokens: 1500",
        "Uses Memory",
        "From Template",
    ]
    assert preview["workers"] == ["Worker 1", "Worker 2", "Worker 3"]
    assert [f["name"] for f in preview["features"]] == ["Memory"]


def test_preview_of_blank_config_is_unconfigured():
    preview = configurator.preview_summary(AgentConfig())
    assert preview["configured"] is False
    assert preview["title"] == "Unnamed Agent"


def test_download_filename():
    assert configurator.download_filename(AgentConfig()) == "agent.ts"


def test_preview_temperature_rounds_ties_up():
    config = AgentConfig(name="Helper", customization=AgentCustomization(temperature=0.25))
    assert "Temp: 0.3" in configurator.preview_summary(config)["badges"]


def test_to_fixed_rounds_the_stored_binary_value():
    assert configurator.to_fixed(0.25, 1) == "0.3"
    assert configurator.to_fixed(0.35, 1) == "0.3"
    assert configurator.to_fixed(0.7, 1) == "0.7"
    assert configurator.to_fixed(1, 1) == "1.0"
    assert configurator.to_fixed(0, 1) == "0.0"

import asyncio

import pytest

from agent_generator import workflow
from agent_generator.events import TOGGLE_SETTINGS, EventBus
from agent_generator.key_store import ApiKeyStore, MemoryKeyValueStore
from agent_generator.models import AgentConfig


def _run(coro):
    return asyncio.run(coro)


class _RecordingDelay:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _keys(**values) -> ApiKeyStore:
    store = ApiKeyStore(MemoryKeyValueStore())
    if values:
        store.save(values)
    return store


def _session(**config) -> workflow.AgentSession:
    base = {"name": "Helper", "model": "mistral", "tasks": ["Check"]}
    base.update(config)
    return workflow.AgentSession(config=AgentConfig(**base))


def test_scratch_generation_waits_then_stores_code():
    session = _session()
    delay = _RecordingDelay()

    result = _run(workflow.generate(session, _keys(mistral="m-key"), delay=delay))

    assert result.source == "scratch"
    assert delay.calls == [workflow.SCRATCH_GENERATION_DELAY]
    assert session.generated_code == result.code
    assert "export default createHelper;" in result.code
    assert session.pending is False


def test_template_generation_is_immediate():
    session = _session(template="chat-agent")
    delay = _RecordingDelay()

    result = _run(workflow.generate(session, _keys(mistral="m-key"), delay=delay))

    assert result.source == "template"
    assert result.template_id == "chat-agent"
    assert delay.calls == []
    assert 'name: "Helper Manager",' in session.generated_code


def test_unknown_template_falls_back_to_scratch():
    session = _session(template="missing-template")
    result = _run(workflow.generate(session, _keys(mistral="m-key"), delay=_RecordingDelay()))
    assert result.source == "scratch"


def test_missing_credential_aborts_before_delay_and_requests_settings():
    session = _session(model="gemini")
    delay = _RecordingDelay()
    bus = EventBus()
    events: list[str] = []

    async def _listener(event_type: str) -> None:
        events.append(event_type)

    bus.add_listener(_listener)

    with pytest.raises(workflow.MissingCredentialError) as exc:
        _run(workflow.generate(session, _keys(mistral="m-key"), delay=delay, bus=bus))

    assert str(exc.value) == "API key for gemini is missing. Please add it in Settings."
    assert delay.calls == []
    assert session.generated_code == ""
    assert events == [TOGGLE_SETTINGS]
    assert session.pending is False


def test_second_operation_while_pending_is_rejected():
    session = _session()
    keys = _keys(mistral="m-key")
    errors: list[Exception] = []

    async def _delay(_seconds: float) -> None:
        try:
            await workflow.run_test(session, keys, "hello", delay=_RecordingDelay())
        except workflow.SessionBusyError as exc:
            errors.append(exc)

    _run(workflow.generate(session, keys, delay=_delay))

    assert len(errors) == 1
    assert session.history == []
    assert session.generated_code
    assert session.pending is False


def test_later_generation_overwrites_previous_output():
    session = _session()
    keys = _keys(mistral="m-key")
    first = _run(workflow.generate(session, keys, delay=_RecordingDelay()))

    session.config = session.config.model_copy(update={"name": "Other"})
    second = _run(workflow.generate(session, keys, delay=_RecordingDelay()))

    assert first.code != second.code
    assert session.generated_code == second.code


def test_select_template_merges_config_and_customizes():
    session = workflow.AgentSession()
    delay = _RecordingDelay()

    result = _run(workflow.select_template(session, "tool-agent", delay=delay))

    assert delay.calls == [workflow.TEMPLATE_SELECT_DELAY]
    assert session.config.template == "tool-agent"
    assert session.config.name == "Tool-using Agent"
    assert session.config.worker_count == 3
    assert 'name: "Tool-using Agent Manager",' in result.code
    assert session.generated_code == result.code


def test_select_unknown_template_raises_key_error():
    with pytest.raises(KeyError):
        _run(workflow.select_template(workflow.AgentSession(), "nope", delay=_RecordingDelay()))


def test_run_test_appends_history():
    session = _session()
    keys = _keys(mistral="m-key")
    delay = _RecordingDelay()

    output = _run(workflow.run_test(session, keys, "calculate 6*7", delay=delay))
    _run(workflow.run_test(session, keys, "calculate 6*7", delay=delay))

    assert delay.calls == [workflow.TEST_RUN_DELAY, workflow.TEST_RUN_DELAY]
    assert output.endswith("I've calculated the result: 42")
    assert session.test_output == output
    assert [entry.output for entry in session.history] == [output, output]


def test_run_test_without_key_reports_error_and_keeps_history():
    session = _session(model="gemini")
    delay = _RecordingDelay()

    with pytest.raises(workflow.MissingCredentialError):
        _run(workflow.run_test(session, _keys(), "hello", delay=delay))

    assert session.test_output == "Error: API key for gemini is missing. Please add it in Settings."
    assert session.history == []
    assert delay.calls == []


def test_run_test_rejects_blank_input():
    session = _session()
    with pytest.raises(workflow.EmptyTestInputError):
        _run(workflow.run_test(session, _keys(mistral="m-key"), "   ", delay=_RecordingDelay()))
    assert session.pending is False


def test_session_registry():
    registry = workflow.SessionRegistry()
    session = registry.create()

    assert registry.get(session.id) is session
    assert registry.get("unknown") is None
    registry.clear()
    assert registry.get(session.id) is None


def test_config_edits_during_test_delay_do_not_reach_the_output():
    session = _session(tasks=["Check"])
    keys = _keys(mistral="m-key")

    async def _delay(_seconds: float) -> None:
        session.config = session.config.model_copy(update={"tasks": ["Check", "Injected late"]})

    output = _run(workflow.run_test(session, keys, "hello", delay=_delay))

    assert "- Check: Completed" in output
    assert "Injected late" not in output


def test_config_edits_during_template_select_do_not_reach_the_code():
    session = _session(name="Helper")

    async def _delay(_seconds: float) -> None:
        session.config = session.config.model_copy(update={"model": "gemini", "name": "Late"})

    result = _run(workflow.select_template(session, "chat-agent", delay=_delay))

    assert 'name: "Helper Manager",' in result.code
    assert "Late Manager" not in result.code
    assert "GoogleGenerativeAI" not in result.code
    assert session.generated_code == result.code

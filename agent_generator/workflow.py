"""Generate / test workflow for one configurator session.

A session owns the configuration being edited, the last generated source, the
last simulated test output and the append-only test history. Operations are
plain coroutines over that state; the simulated latency is an injected
`delay(seconds)` coroutine so callers (and tests) decide whether to wait.

Ordering rules:
- the credential check runs before any delay, so a missing key aborts
  immediately with no output;
- only one generate/test may be pending per session; a finished operation
  always overwrites the previous output;
- nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Optional

from . import codegen, configurator, simulator
from .events import TOGGLE_SETTINGS, EventBus
from .key_store import ApiKeyStore
from .models import AgentConfig, TestHistoryEntry
from .runtime_config import delay_scale
from .template_catalog import get_template

logger = logging.getLogger("agent-generator.workflow")

Delay = Callable[[float], Awaitable[None]]

SCRATCH_GENERATION_DELAY = 2.0
TEMPLATE_SELECT_DELAY = 1.0
TEST_RUN_DELAY = 2.0


class MissingCredentialError(ValueError):
    def __init__(self, model: str):
        self.model = model
        super().__init__(f"API key for {model} is missing. Please add it in Settings.")


class SessionBusyError(RuntimeError):
    pass


class EmptyTestInputError(ValueError):
    pass


async def scaled_sleep(seconds: float) -> None:
    scaled = seconds * delay_scale()
    if scaled > 0:
        await asyncio.sleep(scaled)


@dataclass
class GenerationResult:
    code: str
    source: Literal["template", "scratch"]
    template_id: Optional[str] = None


@dataclass
class AgentSession:
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    config: AgentConfig = field(default_factory=AgentConfig)
    generated_code: str = ""
    test_output: str = ""
    history: list[TestHistoryEntry] = field(default_factory=list)
    pending: bool = False

    def begin(self, action: str) -> None:
        if self.pending:
            raise SessionBusyError(f"Session {self.id} is busy; wait for the current operation before {action}.")
        self.pending = True

    def finish(self) -> None:
        self.pending = False


def ensure_credentials(keys: ApiKeyStore, model: str) -> None:
    if not keys.has_key(model):
        raise MissingCredentialError(model)


def render_code(config: AgentConfig) -> GenerationResult:
    """Customize the configured template, or build from scratch when there is none."""
    template = get_template(config.template)
    if template is not None:
        return GenerationResult(
            code=codegen.customize_template(template, config),
            source="template",
            template_id=template.id,
        )
    if config.template:
        logger.info("Template %r not found; generating from scratch", config.template)
    return GenerationResult(code=codegen.generate_agent_code(config), source="scratch")


async def _request_settings(bus: Optional[EventBus]) -> None:
    if bus is not None:
        await bus.broadcast(TOGGLE_SETTINGS)


async def generate(
    session: AgentSession,
    keys: ApiKeyStore,
    *,
    delay: Delay = scaled_sleep,
    bus: Optional[EventBus] = None,
) -> GenerationResult:
    session.begin("generating")
    try:
        try:
            ensure_credentials(keys, session.config.model)
        except MissingCredentialError:
            logger.warning("Generation blocked for session %s: no %s key", session.id, session.config.model)
            await _request_settings(bus)
            raise

        result = render_code(session.config)
        # Template customization is immediate; scratch generation shows the spinner.
        if result.source == "scratch":
            await delay(SCRATCH_GENERATION_DELAY)
        session.generated_code = result.code
        logger.info(
            "Generated %s code for session %s (%s chars)",
            result.source,
            session.id,
            len(result.code),
        )
        return result
    finally:
        session.finish()


async def select_template(
    session: AgentSession,
    template_id: str,
    *,
    delay: Delay = scaled_sleep,
) -> GenerationResult:
    template = get_template(template_id)
    if template is None:
        raise KeyError(template_id)

    session.begin("selecting a template")
    try:
        config = configurator.apply_template(session.config, template)
        session.config = config
        await delay(TEMPLATE_SELECT_DELAY)
        code = codegen.customize_template(template, config)
        session.generated_code = code
        logger.info("Applied template %s to session %s", template.id, session.id)
        return GenerationResult(code=code, source="template", template_id=template.id)
    finally:
        session.finish()


async def run_test(
    session: AgentSession,
    keys: ApiKeyStore,
    text: str,
    *,
    delay: Delay = scaled_sleep,
    bus: Optional[EventBus] = None,
) -> str:
    if not (text or "").strip():
        raise EmptyTestInputError("Test input is empty")

    session.begin("running a test")
    try:
        session.test_output = ""
        try:
            ensure_credentials(keys, session.config.model)
        except MissingCredentialError as exc:
            logger.warning("Test blocked for session %s: no %s key", session.id, session.config.model)
            session.test_output = f"Error: {exc}"
            await _request_settings(bus)
            raise

        # The run uses the config as it was when the test was started.
        config = session.config
        await delay(TEST_RUN_DELAY)
        output, session.history = simulator.run_simulated_test(config, text, session.history)
        session.test_output = output
        logger.info("Simulated test for session %s (%s history entries)", session.id, len(session.history))
        return output
    finally:
        session.finish()


class SessionRegistry:
    """In-memory sessions; lost on restart like the browser tab state."""

    def __init__(self):
        self._sessions: dict[str, AgentSession] = {}

    def create(self, config: Optional[AgentConfig] = None) -> AgentSession:
        session = AgentSession(config=config or AgentConfig())
        self._sessions[session.id] = session
        logger.info("Session %s created", session.id)
        return session

    def get(self, session_id: str) -> Optional[AgentSession]:
        return self._sessions.get(session_id)

    def clear(self) -> None:
        self._sessions.clear()


sessions = SessionRegistry()

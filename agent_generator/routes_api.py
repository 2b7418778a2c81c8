"""Agent Generator REST API routes."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from . import configurator, workflow
from .events import TOGGLE_SETTINGS, bus
from .key_store import ApiKeyStore, default_key_store
from .models import (
    AgentConfig,
    ApiKeysIn,
    ApiKeysMetaOut,
    GenerateOut,
    PreviewOut,
    SessionOut,
    TaskIn,
    TemplateSelectIn,
    TemplateSummaryOut,
    TestRunIn,
    TestRunOut,
)
from .template_catalog import get_template, list_templates

router = APIRouter(prefix="/api", tags=["api"])


def _key_store() -> ApiKeyStore:
    return default_key_store()


def _session(session_id: str) -> workflow.AgentSession:
    session = workflow.sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


def _editable_session(session_id: str) -> workflow.AgentSession:
    session = _session(session_id)
    if session.pending:
        raise HTTPException(409, "Session is busy")
    return session


def _history_out(session: workflow.AgentSession) -> list[dict]:
    return [
        {"input": entry.input, "output": entry.output, "summary": entry.summary}
        for entry in session.history
    ]


def _session_out(session: workflow.AgentSession) -> dict:
    return {
        "id": session.id,
        "config": session.config,
        "generated_code": session.generated_code,
        "test_output": session.test_output,
        "history": _history_out(session),
        "pending": session.pending,
    }


# ── Templates ──────────────────────────────────────────────
@router.get("/templates", response_model=list[TemplateSummaryOut])
async def templates_list():
    return list_templates()


@router.get("/templates/{template_id}")
async def templates_get(template_id: str):
    template = get_template(template_id)
    if template is None:
        raise HTTPException(404, "Template not found")
    return template.model_dump(by_alias=True)


# ── Sessions ───────────────────────────────────────────────
@router.post("/sessions", response_model=SessionOut)
async def sessions_create():
    return _session_out(workflow.sessions.create())


@router.get("/sessions/{session_id}", response_model=SessionOut)
async def sessions_get(session_id: str):
    return _session_out(_session(session_id))


@router.put("/sessions/{session_id}/config", response_model=SessionOut)
async def sessions_update_config(session_id: str, body: AgentConfig):
    session = _editable_session(session_id)
    tasks_changed = body.tasks != session.config.tasks
    session.config = configurator.with_tasks(body, body.tasks) if tasks_changed else body
    return _session_out(session)


@router.post("/sessions/{session_id}/tasks", response_model=SessionOut)
async def sessions_add_task(session_id: str, body: TaskIn):
    session = _editable_session(session_id)
    if not body.task.strip():
        raise HTTPException(400, "Task cannot be empty")
    session.config = configurator.add_task(session.config, body.task)
    return _session_out(session)


@router.delete("/sessions/{session_id}/tasks/{index}", response_model=SessionOut)
async def sessions_remove_task(session_id: str, index: int):
    session = _editable_session(session_id)
    try:
        session.config = configurator.remove_task(session.config, index)
    except IndexError:
        raise HTTPException(404, "Task not found")
    return _session_out(session)


@router.post("/sessions/{session_id}/template", response_model=GenerateOut)
async def sessions_select_template(session_id: str, body: TemplateSelectIn):
    session = _session(session_id)
    try:
        result = await workflow.select_template(session, body.template_id)
    except KeyError:
        raise HTTPException(404, "Template not found")
    except workflow.SessionBusyError as exc:
        raise HTTPException(409, str(exc))
    return {
        "session_id": session.id,
        "source": result.source,
        "template_id": result.template_id,
        "code": result.code,
    }


@router.post("/sessions/{session_id}/generate", response_model=GenerateOut)
async def sessions_generate(session_id: str):
    session = _session(session_id)
    try:
        result = await workflow.generate(session, _key_store(), bus=bus)
    except workflow.MissingCredentialError as exc:
        raise HTTPException(400, str(exc))
    except workflow.SessionBusyError as exc:
        raise HTTPException(409, str(exc))
    return {
        "session_id": session.id,
        "source": result.source,
        "template_id": result.template_id,
        "code": result.code,
    }


@router.post("/sessions/{session_id}/test", response_model=TestRunOut)
async def sessions_test(session_id: str, body: TestRunIn):
    session = _session(session_id)
    try:
        output = await workflow.run_test(session, _key_store(), body.input, bus=bus)
    except workflow.EmptyTestInputError as exc:
        raise HTTPException(400, str(exc))
    except workflow.MissingCredentialError as exc:
        raise HTTPException(400, str(exc))
    except workflow.SessionBusyError as exc:
        raise HTTPException(409, str(exc))
    return {"session_id": session.id, "output": output, "history": _history_out(session)}


@router.get("/sessions/{session_id}/preview", response_model=PreviewOut)
async def sessions_preview(session_id: str):
    return configurator.preview_summary(_session(session_id).config)


@router.get("/sessions/{session_id}/download")
async def sessions_download(session_id: str):
    session = _session(session_id)
    if not session.generated_code:
        raise HTTPException(404, "No code generated yet")
    filename = configurator.download_filename(session.config)
    return PlainTextResponse(
        session.generated_code,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Settings ───────────────────────────────────────────────
@router.get("/settings/api-keys", response_model=ApiKeysMetaOut)
async def settings_api_keys_get():
    return _key_store().meta()


@router.post("/settings/api-keys", response_model=ApiKeysMetaOut)
async def settings_api_keys_save(body: ApiKeysIn):
    store = _key_store()
    store.save({"gemini": body.gemini, "mistral": body.mistral})
    return store.meta()


@router.post("/settings/open")
async def settings_open():
    await bus.broadcast(TOGGLE_SETTINGS)
    return {"ok": True, "event": TOGGLE_SETTINGS, "clients": bus.client_count}

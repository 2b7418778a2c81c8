"""Runtime path and environment helpers.

This module centralizes file-system locations and tunables so local runs and
tests share one source of truth without hardcoded machine paths.
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "AgentGenerator"
PACKAGE_ROOT = Path(__file__).resolve().parent
TEMPLATE_CODE_DIR = PACKAGE_ROOT / "template_code"

API_KEYS_STORAGE_KEY = "agent-generator-api-keys"


def _default_home() -> Path:
    return Path(user_data_dir(APP_NAME, appauthor=False))


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def home_dir() -> Path:
    return Path(
        os.environ.get("AGENT_GENERATOR_HOME", str(_default_home()))
    ).expanduser().resolve()


def storage_path() -> Path:
    return Path(
        os.environ.get("AGENT_GENERATOR_STORAGE_PATH", str(home_dir() / "storage.json"))
    ).expanduser().resolve()


def delay_scale() -> float:
    return _env_float("AGENT_GENERATOR_DELAY_SCALE", 1.0)


def server_host() -> str:
    return (os.environ.get("AGENT_GENERATOR_HOST") or "127.0.0.1").strip()


def server_port() -> int:
    return _env_int("AGENT_GENERATOR_PORT", 8000)


def ensure_runtime_dirs() -> None:
    home_dir().mkdir(parents=True, exist_ok=True)
    storage_path().parent.mkdir(parents=True, exist_ok=True)

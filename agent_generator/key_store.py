"""Key-value storage for API keys.

The whole credential set lives in ONE entry: a JSON-encoded object mapping
model name to secret, stored under `API_KEYS_STORAGE_KEY`. The store itself is
injected so generation and testing can be exercised without touching disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from .models import ModelName
from .runtime_config import API_KEYS_STORAGE_KEY, storage_path
from .secrets_vault import decrypt_secret, encrypt_secret, last4, mask_key

logger = logging.getLogger("agent-generator.keys")

KNOWN_MODELS: tuple[ModelName, ...] = ("gemini", "mistral")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store; state lives only as long as the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """String entries persisted in a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Storage file %s is unreadable; treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class ApiKeyStore:
    def __init__(self, store: KeyValueStore, storage_key: str = API_KEYS_STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    def has_entry(self) -> bool:
        return self.store.get(self.storage_key) is not None

    def load(self) -> dict[str, str]:
        raw = self.store.get(self.storage_key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored API keys are not valid JSON; ignoring them")
            return {}
        if not isinstance(data, dict):
            return {}
        keys: dict[str, str] = {}
        for model, value in data.items():
            if isinstance(value, str):
                keys[str(model)] = decrypt_secret(value)
        return keys

    def save(self, keys: dict[str, str]) -> None:
        payload = {model: encrypt_secret(value) for model, value in keys.items()}
        self.store.set(self.storage_key, json.dumps(payload))
        configured = sorted(model for model, value in payload.items() if value)
        logger.info("API keys saved (configured: %s)", ", ".join(configured) or "none")

    def get_key(self, model: str) -> str:
        return self.load().get(model, "")

    def has_key(self, model: str) -> bool:
        return bool(self.get_key(model))

    def meta(self) -> dict[str, dict]:
        keys = self.load()
        return {
            model: {
                "model": model,
                "has_key": bool(keys.get(model)),
                "last4": last4(keys.get(model, "")),
                "key_masked": mask_key(keys.get(model, "")),
            }
            for model in KNOWN_MODELS
        }


def default_key_store() -> ApiKeyStore:
    return ApiKeyStore(JsonFileKeyValueStore(storage_path()))

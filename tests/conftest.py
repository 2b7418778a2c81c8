"""Global pytest environment isolation for Agent Generator.

Ensures tests never write to a developer's real app data and never wait on
the simulated UI delays.
"""

from __future__ import annotations

import atexit
import os
import shutil
import tempfile
from pathlib import Path

import pytest

TEST_ROOT = Path(tempfile.mkdtemp(prefix="agent-generator-tests-")).resolve()
TEST_HOME = TEST_ROOT / "home"
TEST_STORAGE = TEST_HOME / "storage.json"

os.environ["AGENT_GENERATOR_HOME"] = str(TEST_HOME)
os.environ["AGENT_GENERATOR_STORAGE_PATH"] = str(TEST_STORAGE)
os.environ["AGENT_GENERATOR_DELAY_SCALE"] = "0"

TEST_HOME.mkdir(parents=True, exist_ok=True)


def _assert_test_isolation() -> None:
    storage = Path(os.environ["AGENT_GENERATOR_STORAGE_PATH"]).resolve()
    if TEST_ROOT not in storage.parents:
        raise RuntimeError(f"AGENT_GENERATOR_STORAGE_PATH escaped test root: {storage}")


_assert_test_isolation()


@pytest.fixture(autouse=True)
def _fresh_storage():
    if TEST_STORAGE.exists():
        TEST_STORAGE.unlink()
    yield
    from agent_generator import workflow

    workflow.sessions.clear()


def _cleanup_test_dirs():
    shutil.rmtree(TEST_ROOT, ignore_errors=True)


atexit.register(_cleanup_test_dirs)

# tests/conftest.py
from pathlib import Path
from typing import Dict, Union

import pytest

from lovelymods.config.loader import reset_config_cache
from lovelymods.core.lua_runtime import InterpreterRuntime
from lovelymods.core.notify import Notifier
from lovelymods.core.registry import ModRegistry

Layout = Dict[str, Union[str, "Layout"]]


def make_dir(root: Path, layout: Layout) -> Path:
    """Creates files (str values) and folders (dict values) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        if isinstance(value, dict):
            make_dir(root / name, value)
        else:
            (root / name).write_text(value, encoding="utf-8")
    return root


class RecordingNotifier(Notifier):
    """Keeps every message instead of showing it."""

    def __init__(self):
        self.messages = []

    def notify(self, message):
        self.messages.append(message)


class FakeRuntime(InterpreterRuntime):
    """Records what ran; scripts containing 'boom' raise."""

    def __init__(self):
        self.states = []
        self.executed = []

    def create_state(self, owner=""):
        state = {"owner": owner, "globals": {}}
        self.states.append(state)
        return state

    def execute(self, state, source):
        if "boom" in source:
            raise RuntimeError("boom: script blew up")
        state["globals"]["last"] = source
        self.executed.append(source)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    # Keep config and logs out of the real user profile
    monkeypatch.setenv("LOVELYMODS_DATA_DIR", str(tmp_path / "appdata"))
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def registry():
    return ModRegistry()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def build_dir():
    return make_dir

"""Shared fixtures for shellpad tests."""

import os
from pathlib import Path

import pytest

import shellpad.config as config
from shellpad.activation import Activator
from shellpad.errors import DeadSessionError, SessionCreationError
from shellpad.host import DiscoveredSession
from shellpad.projects import StaticProjectProvider
from shellpad.registry import SessionRegistry


class FakeHost:
    """In-memory SessionHost that records every call."""

    def __init__(self):
        self.sessions: dict[str, dict] = {}  # handle -> {name, directory, kind, env, lines, tags}
        self.current: str | None = None
        self.marker: str | None = None
        self.messages: list[str] = []
        self.bindings: list[tuple[str, str, str]] = []
        self.calls: list[str] = []
        self.fail_create: Exception | None = None
        self.watch_env: str = "HISTFILE"
        self._next_id = 0

    def create_session(self, name, directory, kind, on_ready):
        self.calls.append("create_session")
        if self.fail_create is not None:
            raise self.fail_create
        if not Path(directory).is_dir():
            raise SessionCreationError(f"{directory} is not a directory")
        handle = f"${self._next_id}"
        self._next_id += 1
        self.sessions[handle] = {
            "name": name,
            "directory": Path(directory),
            "kind": kind,
            "env": os.environ.get(self.watch_env),
            "lines": [],
            "tags": None,
            "live": True,
        }
        on_ready(handle)
        return handle

    def send_line(self, handle, text):
        self.calls.append("send_line")
        if not self.is_live(handle):
            raise DeadSessionError(handle)
        self.sessions[handle]["lines"].append(text)

    def is_live(self, handle):
        return handle in self.sessions and self.sessions[handle]["live"]

    def kill(self, handle):
        self.sessions[handle]["live"] = False

    def focus(self, handle):
        self.calls.append("focus")
        if not self.is_live(handle):
            raise DeadSessionError(handle)
        self.current = handle

    def current_handle(self):
        return self.current

    def message(self, text):
        self.messages.append(text)

    def discover(self):
        found = []
        for handle, info in self.sessions.items():
            if not info["live"]:
                continue
            tags = info["tags"]
            found.append(
                DiscoveredSession(
                    handle=handle,
                    name=info["name"],
                    project=tags[0] if tags else None,
                    root=tags[1] if tags else None,
                )
            )
        return found

    def tag(self, handle, project, root):
        self.sessions[handle]["tags"] = (project, Path(root))

    def load_marker(self):
        return self.marker

    def store_marker(self, name):
        self.marker = name

    def bind_key(self, table, key, command):
        self.bindings.append((table, key, command))

    def default_shell(self):
        return "/bin/zsh"


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def registry(host):
    return SessionRegistry(host)


@pytest.fixture
def settings(tmp_path):
    """Default settings with the session root under tmp_path."""
    s = dict(config._SETTINGS_DEFAULTS)
    s["session_root"] = str(tmp_path / "sessions")
    return s


@pytest.fixture
def project_dir(tmp_path):
    d = tmp_path / "kernel"
    d.mkdir()
    return d


@pytest.fixture
def activator(registry, settings, project_dir):
    """Activator whose detected project is "kernel" rooted at project_dir."""
    return Activator(registry, settings, provider=StaticProjectProvider("kernel", project_dir))


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the home directory at a temp dir."""
    h = tmp_path / "home"
    h.mkdir()
    monkeypatch.setenv("HOME", str(h))
    return h


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep tests away from the real settings file and history variable."""
    monkeypatch.delenv("HISTFILE", raising=False)
    monkeypatch.delenv("SHELLPAD_SHELL", raising=False)
    monkeypatch.setenv("SHELLPAD_CONFIG", str(tmp_path / "config.json"))
    config.init(None)
    config._settings_cache = None
    yield
    config.init(None)
    config._settings_cache = None

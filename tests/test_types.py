"""Tests for type definitions."""

from pathlib import Path

import pytest

from shellpad.types import ShellEntry, ShellKind, Session, canonical_name


class TestShellEntry:
    def test_from_dict_full(self):
        entry = ShellEntry.from_dict({"name": "build", "directory": "/src/kernel", "kind": "terminal"})
        assert entry == ShellEntry(name="build", directory=Path("/src/kernel"), kind=ShellKind.TERMINAL)

    def test_from_dict_missing_fields(self):
        assert ShellEntry.from_dict({}) == ShellEntry()

    def test_from_dict_expands_home(self, home):
        assert ShellEntry.from_dict({"directory": "~/kernel"}).directory == home / "kernel"

    def test_from_dict_bad_kind(self):
        with pytest.raises(ValueError):
            ShellEntry.from_dict({"kind": "window"})


def test_canonical_name():
    assert canonical_name("1", "build", "kernel") == "1.build.kernel"
    assert canonical_name("1", "shell", "") == "1.shell."


def test_session_str():
    assert str(Session(name="1.build.kernel", handle="$1")) == "1.build.kernel"

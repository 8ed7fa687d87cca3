"""Tests for the command line (tmux replaced by the fake host)."""

import json
from unittest.mock import patch

import pytest

from shellpad import cli


@pytest.fixture
def run(host, tmp_path, monkeypatch):
    """Run the CLI against the fake host; returns the exit code."""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))

    def _run(*argv):
        with patch("shellpad.cli.TmuxHost", lambda *a, **kw: host):
            try:
                cli.main(list(argv))
            except SystemExit as e:
                return e.code
        return 0

    return _run


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"session_root": str(tmp_path / "sessions"), "keys": ["1", "2", "4"], "term_keys": ["4"]}))
    return path


class TestActivate:
    def test_creates_then_switches(self, run, host, config_file, project_dir, tmp_path):
        args = ("--config", str(config_file), "activate", "--project", "kernel", "--root", str(project_dir), "1")
        assert run(*args) == 0
        assert [s["name"] for s in host.sessions.values()] == ["1.shell.kernel"]
        assert (tmp_path / "sessions" / "kernel" / "1").is_dir()

        # A new process rediscovers the session instead of creating another
        assert run(*args) == 0
        assert len(host.sessions) == 1

    def test_term_flag(self, run, host, config_file, project_dir):
        run("--config", str(config_file), "activate", "--term", "-p", "kernel", "-r", str(project_dir), "2")
        (info,) = host.sessions.values()
        assert info["lines"] == ['exec "/bin/zsh"\n']

    def test_global(self, run, host, config_file, home):
        run("--config", str(config_file), "activate", "--global", "1")
        (info,) = host.sessions.values()
        assert info["name"] == "1.shell."
        assert info["directory"] == home

    def test_failure_is_one_line(self, run, host, config_file, tmp_path, capsys):
        code = run("--config", str(config_file), "activate", "-p", "x", "-r", str(tmp_path / "missing"), "1")
        assert code == 1
        err = capsys.readouterr().err.strip().splitlines()
        assert len(err) == 1
        assert err[0].startswith("Error: ")
        assert host.messages and host.messages[-1].startswith("shellpad: ")


class TestSwitching:
    def test_last_without_sessions(self, run, host, config_file):
        assert run("--config", str(config_file), "last") == 1
        assert host.messages == ["No shell sessions available"]

    def test_switch_unknown(self, run, host, config_file):
        assert run("--config", str(config_file), "switch", "1.shell.nope") == 1
        assert host.messages == ["No such session: 1.shell.nope"]

    def test_switch_known(self, run, host, config_file, project_dir):
        run("--config", str(config_file), "activate", "-p", "kernel", "-r", str(project_dir), "1")
        host.current = None
        assert run("--config", str(config_file), "switch", "1.shell.kernel") == 0
        assert host.current is not None


class TestSendAndList:
    def test_send_to_named_session(self, run, host, config_file, project_dir):
        run("--config", str(config_file), "activate", "-p", "kernel", "-r", str(project_dir), "1")
        assert run("--config", str(config_file), "send", "-s", "1.shell.kernel", "make", "-j8") == 0
        (info,) = host.sessions.values()
        assert info["lines"] == ["make -j8"]

    def test_send_without_target(self, run, host, config_file):
        assert run("--config", str(config_file), "send", "ls") == 1

    def test_send_to_unknown_session(self, run, host, config_file):
        assert run("--config", str(config_file), "send", "-s", "1.shell.nope", "ls") == 1
        assert host.messages == ["No such session: 1.shell.nope"]
        assert host.calls == []

    def test_list(self, run, host, config_file, project_dir, capsys):
        run("--config", str(config_file), "list")
        assert "No live sessions." in capsys.readouterr().out
        run("--config", str(config_file), "activate", "-p", "kernel", "-r", str(project_dir), "1")
        run("--config", str(config_file), "list")
        out = capsys.readouterr().out
        assert "1.shell.kernel" in out
        assert str(project_dir) in out


class TestBind:
    def test_print(self, run, config_file, capsys):
        assert run("--config", str(config_file), "bind", "--print") == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 6
        assert lines[0].startswith("bind-key -T prefix 1 run-shell ")
        assert "--term" in lines[4]

    def test_bind(self, run, host, config_file):
        assert run("--config", str(config_file), "bind", "--keys", "1,2", "--term-keys", "2", "-T", "sp") == 0
        assert [(t, k) for t, k, _ in host.bindings] == [("sp", "1"), ("sp", "M-1"), ("sp", "2"), ("sp", "M-2")]
        assert str(config_file.resolve()) in host.bindings[0][2]

    def test_bind_rejects_unknown_term_key(self, run, host, config_file):
        assert run("--config", str(config_file), "bind", "--keys", "1", "--term-keys", "9") == 1
        assert host.bindings == []

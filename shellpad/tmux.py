"""SessionHost backed by tmux.

Each shellpad session is a detached tmux session. Its handle is the tmux
session id ("$3") and its canonical name lives in the @shellpad-name
session option. The tmux session name is only a readable label. Project
tags and the last-focused marker are tmux user options too, so they live
exactly as long as the tmux server does.

All calls are synchronous subprocess.run invocations of the tmux CLI.
"""

import hashlib
import os
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from .errors import DeadSessionError, SessionCreationError
from .host import DiscoveredSession
from .logging_config import get_logger
from .types import ShellKind

logger = get_logger(__name__)

TMUX_TIMEOUT = 10  # seconds per tmux invocation
TERMINAL_BOOTSTRAP = "/bin/sh"  # Fixed command for TERMINAL sessions

NAME_OPTION = "@shellpad-name"
PROJECT_OPTION = "@shellpad-project"
ROOT_OPTION = "@shellpad-root"
MARKER_OPTION = "@shellpad-last"

_FIELD_SEP = "\t"


def tmux_session_name(name: str) -> str:
    """tmux-safe session name for a canonical name.

    tmux rewrites "." and ":", so "1.shell.my.app" and "1.shell.my_app"
    would both become "1_shell_my_app". A digest of the canonical name keeps
    them apart.
    """
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    readable = name.replace(".", "_").replace(":", "_")
    return f"{readable}-{digest}"


class TmuxHost:
    """Runs sessions in a tmux server.

    shell is the argv started for SHELL sessions (None lets tmux use its
    default-command/default-shell). env_passthrough names environment
    variables copied into each new session at creation time.
    """

    def __init__(
        self,
        shell: Sequence[str] | None = None,
        env_passthrough: Sequence[str] = ("HISTFILE",),
        socket_name: str | None = None,
        binary: str = "tmux",
    ):
        self.shell = list(shell) if shell else None
        self.env_passthrough = list(env_passthrough)
        self.socket_name = socket_name
        self.binary = binary

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self.binary]
        if self.socket_name:
            cmd.extend(["-L", self.socket_name])
        cmd.extend(args)
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=TMUX_TIMEOUT)
        except FileNotFoundError as e:
            raise RuntimeError(f"{self.binary} not found in PATH") from e
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"tmux {args[0]} timed out after {TMUX_TIMEOUT}s") from e

    def _tmux(self, *args: str) -> str:
        """Run a tmux command, return stdout. Raises RuntimeError on failure."""
        result = self._run(*args)
        if result.returncode != 0:
            err = result.stderr.strip()
            raise RuntimeError(f"tmux {args[0]} failed ({result.returncode}): {err}")
        return result.stdout

    # --- Session lifecycle ---

    def create_session(
        self,
        name: str,
        directory: Path,
        kind: ShellKind,
        on_ready: Callable[[str], None],
    ) -> str:
        directory = Path(directory).expanduser()
        if not directory.is_dir():
            raise SessionCreationError(f"Cannot start {name}: {directory} is not a directory")

        args = [
            "new-session",
            "-d",
            "-P",
            "-F",
            "#{session_id}",
            "-s",
            tmux_session_name(name),
            "-c",
            str(directory),
        ]
        for var in self.env_passthrough:
            value = os.environ.get(var)
            if value is not None:
                args.extend(["-e", f"{var}={value}"])

        if kind == ShellKind.TERMINAL:
            args.append(TERMINAL_BOOTSTRAP)
        elif self.shell:
            args.append(shlex.join(self.shell))

        logger.info(f"Creating tmux session for {name} in {directory}")
        try:
            result = self._run(*args)
        except RuntimeError as e:
            raise SessionCreationError(f"Failed to create {name}: {e}") from e
        if result.returncode != 0:
            raise SessionCreationError(f"Failed to create {name}: {result.stderr.strip()}")
        handle = result.stdout.strip()

        try:
            self._tmux("set-option", "-t", handle, NAME_OPTION, name)
            on_ready(handle)
        except Exception:
            # Not registered anywhere yet: don't leave a half-initialized session behind
            self._run("kill-session", "-t", handle)
            raise
        return handle

    def send_line(self, handle: str, text: str) -> None:
        if not self.is_live(handle):
            raise DeadSessionError(handle)
        line = text[:-1] if text.endswith("\n") else text
        try:
            if line:
                self._tmux("send-keys", "-t", handle, "-l", line)
            self._tmux("send-keys", "-t", handle, "Enter")
        except RuntimeError as e:
            raise DeadSessionError(handle, str(e)) from e

    def is_live(self, handle: str) -> bool:
        try:
            return self._run("has-session", "-t", handle).returncode == 0
        except RuntimeError:
            return False

    def focus(self, handle: str) -> None:
        try:
            self._tmux("switch-client", "-t", handle)
        except RuntimeError as e:
            if not self.is_live(handle):
                raise DeadSessionError(handle) from e
            raise

    def current_handle(self) -> str | None:
        try:
            handle = self._tmux("display-message", "-p", "#{session_id}").strip()
        except RuntimeError as e:
            logger.debug("No current tmux session: %s", e)
            return None
        return handle or None

    def message(self, text: str) -> None:
        try:
            self._tmux("display-message", text)
        except RuntimeError as e:
            logger.debug("display-message failed: %s", e)

    # --- Host-side state ---

    def discover(self) -> list[DiscoveredSession]:
        fmt = _FIELD_SEP.join(
            [
                "#{session_id}",
                "#{" + NAME_OPTION + "}",
                "#{" + PROJECT_OPTION + "}",
                "#{" + ROOT_OPTION + "}",
            ]
        )
        try:
            output = self._tmux("list-sessions", "-F", fmt)
        except RuntimeError as e:
            # No server running means no sessions
            logger.debug("list-sessions failed: %s", e)
            return []

        found = []
        for line in output.splitlines():
            parts = line.split(_FIELD_SEP)
            if len(parts) < 2 or not parts[1]:
                continue
            handle, name = parts[0], parts[1]
            project = parts[2] if len(parts) > 2 else ""
            root = parts[3] if len(parts) > 3 else ""
            found.append(
                DiscoveredSession(
                    handle=handle,
                    name=name,
                    # A tagged global session has an empty project but a root
                    project=project if (project or root) else None,
                    root=Path(root) if root else None,
                )
            )
        return found

    def tag(self, handle: str, project: str, root: Path) -> None:
        self._tmux("set-option", "-t", handle, PROJECT_OPTION, project)
        self._tmux("set-option", "-t", handle, ROOT_OPTION, str(root))

    def load_marker(self) -> str | None:
        try:
            value = self._tmux("show-options", "-gqv", MARKER_OPTION).strip()
        except RuntimeError:
            return None
        return value or None

    def store_marker(self, name: str) -> None:
        try:
            self._tmux("set-option", "-g", MARKER_OPTION, name)
        except RuntimeError as e:
            logger.debug("Failed to store last-focused marker: %s", e)

    def bind_key(self, table: str, key: str, command: str) -> None:
        self._tmux("bind-key", "-T", table, key, "run-shell", command)

    def default_shell(self) -> str:
        try:
            shell = self._tmux("show-options", "-gv", "default-shell").strip()
        except RuntimeError:
            shell = ""
        return shell or os.environ.get("SHELL") or "/bin/sh"

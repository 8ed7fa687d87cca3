"""Interface to the environment that actually runs sessions.

Everything the registry and activation engine need from the outside world
goes through a SessionHost: spawning, typing into, polling and focusing
sessions, plus a few pieces of host-side state (tags, a marker, bindings).
TmuxHost is the real implementation; tests use an in-memory fake.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .types import ShellKind


@dataclass(frozen=True)
class DiscoveredSession:
    """A session found on the host that carries a shellpad name."""

    handle: str
    name: str
    project: str | None = None
    root: Path | None = None


class SessionHost(Protocol):
    def create_session(
        self,
        name: str,
        directory: Path,
        kind: ShellKind,
        on_ready: Callable[[str], None],
    ) -> str:
        """Spawn a session rooted at directory and return its handle.

        Calls on_ready(handle) once the session accepts input.
        Raises SessionCreationError if it cannot be spawned.
        """
        ...

    def send_line(self, handle: str, text: str) -> None:
        """Type text plus newline. Raises DeadSessionError if the handle died."""
        ...

    def is_live(self, handle: str) -> bool: ...

    def focus(self, handle: str) -> None: ...

    def current_handle(self) -> str | None:
        """Handle of the session the user is currently in, if any."""
        ...

    def message(self, text: str) -> None:
        """Show a short, non-blocking message to the user."""
        ...

    def discover(self) -> Iterable[DiscoveredSession]: ...

    def tag(self, handle: str, project: str, root: Path) -> None: ...

    def load_marker(self) -> str | None: ...

    def store_marker(self, name: str) -> None: ...

    def bind_key(self, table: str, key: str, command: str) -> None: ...

    def default_shell(self) -> str: ...

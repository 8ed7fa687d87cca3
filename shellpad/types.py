"""Type definitions for shell sessions and their configuration."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from typing_extensions import Self

# Reserved project identifier for global (non-project) sessions
EMPTY_PROJECT = ""


class ShellKind(str, Enum):
    """How a session's process is started."""

    SHELL = "shell"  # Preferred shell binary, started directly
    TERMINAL = "terminal"  # Raw terminal, re-execs the preferred shell once ready


InitHook = Callable[[Path], None]


@dataclass(frozen=True)
class ShellEntry:
    """One configured (project, key) slot. Unset fields take defaults at resolve time."""

    name: str | None = None
    directory: Path | None = None
    kind: ShellKind | None = None
    init_hook: InitHook | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], init_hook: InitHook | None = None) -> Self:
        """Create from a JSON config entry, handling missing fields gracefully."""
        directory = data.get("directory")
        kind = data.get("kind")
        return cls(
            name=data.get("name") or None,
            directory=Path(directory).expanduser() if directory else None,
            kind=ShellKind(kind) if kind else None,
            init_hook=init_hook,
        )


@dataclass(frozen=True)
class ShellSpec:
    """Resolved configuration for one activation. Never persisted."""

    name: str
    directory: Path
    kind: ShellKind = ShellKind.SHELL
    init_hook: InitHook | None = None


# project -> key -> entry
ProjectConfig = dict[str, dict[str, ShellEntry]]


@dataclass(frozen=True)
class ProjectContext:
    """A project identifier together with its root directory."""

    project: str
    root: Path


@dataclass
class Session:
    """A live shell session: display identity plus the host's handle."""

    name: str  # Canonical name, unique among live sessions
    handle: str  # Host handle (tmux session id, e.g. "$3")

    def __str__(self) -> str:
        return self.name


def canonical_name(key: str, shell_name: str, project: str) -> str:
    """Identity of a session: ``{key}.{shell_name}.{project}``."""
    return f"{key}.{shell_name}.{project}"

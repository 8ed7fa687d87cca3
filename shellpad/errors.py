"""Exceptions raised while standing up or talking to shell sessions.

Configuration gaps and lookup misses are not errors: the former resolve to
defaults, the latter are reported to the user as a message and yield None.
"""


class ShellpadError(RuntimeError):
    """Base class for shellpad failures."""


class SessionCreationError(ShellpadError):
    """The host could not spawn a session (bad directory, tmux failure)."""


class DeadSessionError(ShellpadError):
    """Text was sent to a session whose handle is no longer live."""

    def __init__(self, handle: str, detail: str = ""):
        self.handle = handle
        msg = f"Session {handle} is no longer live"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class DirectoryCreationError(OSError):
    """The session directory could not be created."""

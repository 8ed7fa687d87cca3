"""Double-quoted command lines for typing into a running shell."""

import os
from collections.abc import Iterable, Mapping

# Environment variable that overrides the host's default shell
SHELL_ENV_VAR = "SHELLPAD_SHELL"


def quote_shell_args(args: Iterable[str]) -> str:
    """Quote each argument in double quotes and join with spaces.

    Backslashes are escaped before double quotes so the backslashes added
    for the quotes are not themselves doubled.
    """
    quoted = []
    for arg in args:
        escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
        quoted.append(f'"{escaped}"')
    return " ".join(quoted)


def preferred_shell(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
    host_default: str | None = None,
) -> str:
    """Pick the shell binary: explicit override, then $SHELLPAD_SHELL, then the host default."""
    if explicit:
        return explicit
    if environ is None:
        environ = os.environ
    override = environ.get(SHELL_ENV_VAR)
    if override:
        return override
    return host_default or "/bin/sh"


def reexec_command_line(shell: str, extra_args: Iterable[str] = ()) -> str:
    """Line that replaces a bootstrap shell with ``shell``."""
    return f"exec {quote_shell_args([shell, *extra_args])}\n"

"""Wire the key palette into a tmux key table.

Each key K in the palette gets two bindings:
  K                      -> shellpad activate K         (detected project)
  {global_modifier}K     -> shellpad activate --global K (empty project)

Keys in term_keys also pass --term so they default to TERMINAL sessions.
"""

import shlex
from collections.abc import Collection, Sequence
from pathlib import Path

from .host import SessionHost
from .logging_config import get_logger

logger = get_logger(__name__)

# Passed to run-shell so project detection starts in the pane's directory
PANE_PATH_FORMAT = "#{pane_current_path}"


def _activate_command(key: str, config_path: Path | None, program: str, global_: bool, term: bool) -> str:
    parts = [program]
    if config_path is not None:
        parts.extend(["--config", str(config_path)])
    parts.append("activate")
    if global_:
        parts.append("--global")
    if term:
        parts.append("--term")
    parts.extend(["--cwd", PANE_PATH_FORMAT, "--", key])
    # tmux expands the format inside the single quotes before the shell runs
    return shlex.join(parts)


def binding_commands(
    keys: Sequence[str],
    term_keys: Collection[str] = (),
    config_path: Path | None = None,
    *,
    global_modifier: str = "M-",
    program: str = "shellpad",
) -> list[tuple[str, str]]:
    """(tmux key, run-shell command) pairs for the palette.

    Raises ValueError if a terminal key is not part of the palette.
    """
    unknown = [k for k in term_keys if k not in keys]
    if unknown:
        raise ValueError(f"Terminal keys not in the key palette: {', '.join(unknown)}")

    pairs = []
    for key in keys:
        term = key in term_keys
        pairs.append((key, _activate_command(key, config_path, program, global_=False, term=term)))
        pairs.append((f"{global_modifier}{key}", _activate_command(key, config_path, program, global_=True, term=term)))
    return pairs


def setup(
    host: SessionHost,
    keys: Sequence[str],
    term_keys: Collection[str] = (),
    config_path: Path | None = None,
    *,
    table: str = "prefix",
    global_modifier: str = "M-",
    program: str = "shellpad",
) -> list[tuple[str, str]]:
    """Bind the palette in the given key table. Returns what was bound."""
    pairs = binding_commands(keys, term_keys, config_path, global_modifier=global_modifier, program=program)
    for tmux_key, command in pairs:
        host.bind_key(table, tmux_key, command)
    logger.info("Bound %d keys in table %s", len(pairs), table)
    return pairs


def tmux_conf_lines(pairs: Sequence[tuple[str, str]], table: str = "prefix") -> list[str]:
    """Render bindings as tmux.conf lines."""
    return [f"bind-key -T {table} {shlex.quote(key)} run-shell {shlex.quote(cmd)}" for key, cmd in pairs]

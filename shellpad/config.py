"""Settings and per-project shell configuration.

Settings live in a JSON file (default ~/.config/shellpad/config.json, or
$SHELLPAD_CONFIG). Call init(path) at startup to point somewhere else.
Missing keys fall back to _SETTINGS_DEFAULTS; a missing project or key in
the "projects" table falls back to the defaults in resolve_shell_spec().
"""

import json
import os
from collections.abc import Callable, Collection
from pathlib import Path
from typing import Any

from .logging_config import get_logger
from .types import InitHook, ProjectConfig, ShellEntry, ShellKind, ShellSpec

logger = get_logger(__name__)

CONFIG_ENV_VAR = "SHELLPAD_CONFIG"
DEFAULT_CONFIG_FILE = Path(os.path.expanduser("~/.config/shellpad/config.json"))

_config_file: Path | None = None


def init(config_file: Path | None) -> None:
    """Set the settings file. None restores the default lookup."""
    global _config_file
    _config_file = Path(config_file).expanduser() if config_file else None


def config_file() -> Path:
    """Settings file: init() value, else $SHELLPAD_CONFIG, else the default path."""
    if _config_file is not None:
        return _config_file
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_FILE


# Settings: read from the config file, cached with mtime check
_settings_cache: dict[str, Any] | None = None
_settings_mtime: float = 0.0
_settings_path: Path | None = None

_SETTINGS_DEFAULTS: dict[str, Any] = {
    # Session directories
    "session_root": "~/.local/share/shellpad/sessions",
    "history_file_name": "history",
    "history_env_var": "HISTFILE",
    # Shells
    "default_shell_name": "shell",
    "shell": None,  # Explicit shell binary, beats $SHELLPAD_SHELL and tmux default-shell
    "shell_args": [],
    # Key palette
    "keys": ["1", "2", "3", "4"],
    "term_keys": [],
    "global_modifier": "M-",
    "key_table": "prefix",
    "log_level": "INFO",
    # project -> key -> {name, directory, kind, init}
    "projects": {},
}


def get_settings() -> dict[str, Any]:
    """Load settings from the config file, with mtime caching and defaults."""
    global _settings_cache, _settings_mtime, _settings_path
    path = config_file()
    try:
        mtime = path.stat().st_mtime
    except OSError:
        mtime = 0.0
    if _settings_cache is None or mtime != _settings_mtime or path != _settings_path:
        settings = dict(_SETTINGS_DEFAULTS)
        if path.exists():
            try:
                loaded = json.loads(path.read_text())
                if isinstance(loaded, dict):
                    settings.update(loaded)
                else:
                    logger.warning("Ignoring %s: top level is not an object", path)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable config %s: %s", path, e)
        _settings_cache = settings
        _settings_mtime = mtime
        _settings_path = path
    return _settings_cache


def session_root(settings: dict[str, Any]) -> Path:
    return Path(settings["session_root"]).expanduser()


def _command_hook(lines: list[str], send_command: Callable[[str], None]) -> InitHook:
    """Init hook that types each configured line into the new session."""

    def hook(session_dir: Path) -> None:
        for line in lines:
            send_command(line)

    return hook


def load_project_config(
    settings: dict[str, Any],
    send_command: Callable[[str], None] | None = None,
) -> ProjectConfig:
    """Build the project -> key -> ShellEntry table from settings["projects"].

    An entry is either a shell name or an object with optional "name",
    "directory", "kind" and "init" (a command line or list of them, typed
    into the new session via send_command).
    """
    result: ProjectConfig = {}
    projects = settings.get("projects") or {}
    for project, keys in projects.items():
        if not isinstance(keys, dict):
            logger.warning("Ignoring project %r: expected an object of keys", project)
            continue
        entries: dict[str, ShellEntry] = {}
        for key, raw in keys.items():
            if isinstance(raw, str):
                raw = {"name": raw}
            elif not isinstance(raw, dict):
                logger.warning("Ignoring %r/%r: expected an object or a shell name", project, key)
                continue
            hook = None
            init_lines = raw.get("init")
            if init_lines and send_command is not None:
                if isinstance(init_lines, str):
                    init_lines = [init_lines]
                hook = _command_hook(list(init_lines), send_command)
            try:
                entries[key] = ShellEntry.from_dict(raw, init_hook=hook)
            except ValueError as e:
                logger.warning("Ignoring %r/%r: %s", project, key, e)
        result[project] = entries
    return result


def resolve_shell_spec(
    project_config: ProjectConfig,
    project: str,
    key: str,
    default_shell_name: str,
    default_root: Path,
    term_keys: Collection[str],
) -> ShellSpec:
    """Look up the spec for (project, key), falling back to defaults field by field.

    A missing project or key is not an error: every field then takes its
    default (name -> default_shell_name, directory -> default_root,
    kind -> TERMINAL for term_keys else SHELL, no init hook).
    """
    entry = project_config.get(project, {}).get(key) or ShellEntry()
    default_kind = ShellKind.TERMINAL if key in term_keys else ShellKind.SHELL
    return ShellSpec(
        name=entry.name or default_shell_name,
        directory=entry.directory or default_root,
        kind=entry.kind or default_kind,
        init_hook=entry.init_hook,
    )

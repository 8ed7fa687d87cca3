"""CLI interface for shellpad.

Entry point: shellpad [--config PATH] <subcommand> [args...]

Usually invoked from tmux key bindings (see `shellpad bind`), once per key
press. Each run rediscovers the live sessions from the tmux server.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from . import config
from .activation import Activator
from .bindings import binding_commands, setup, tmux_conf_lines
from .errors import ShellpadError
from .logging_config import get_logger, setup_process_logging
from .projects import GitProjectProvider
from .quoting import SHELL_ENV_VAR, preferred_shell
from .registry import SessionRegistry
from .tmux import TmuxHost

logger = get_logger(__name__)


def _make_host(settings: dict) -> TmuxHost:
    host = TmuxHost(env_passthrough=[settings["history_env_var"]])
    explicit = settings.get("shell") or os.environ.get(SHELL_ENV_VAR)
    shell_args = list(settings.get("shell_args") or [])
    if explicit or shell_args:
        host.shell = [preferred_shell(settings.get("shell"), host_default=host.default_shell()), *shell_args]
    return host


def _make_activator(args) -> Activator:
    settings = config.get_settings()
    registry = SessionRegistry(_make_host(settings))
    registry.rediscover()
    cwd = getattr(args, "cwd", None)
    activator = Activator(registry, settings, provider=GitProjectProvider(Path(cwd) if cwd else None))
    activator.replace_config(config.load_project_config(settings, activator.send_shell_command))
    return activator


# --- Subcommands ---


def cmd_activate(args):
    """Switch to (or create) the session bound to a key."""
    activator = _make_activator(args)
    root = Path(args.root) if args.root else None
    session = activator.activate_for_key(
        args.key,
        project=args.project,
        project_root=root,
        global_=args.global_,
        term=True if args.term else None,
    )
    logger.debug("Active: %s", session.name)


def cmd_last(args):
    """Switch to the most recently focused session."""
    activator = _make_activator(args)
    if activator.switch_to_last() is None:
        sys.exit(1)


def cmd_switch(args):
    """Switch to a live session by canonical name."""
    activator = _make_activator(args)
    if activator.switch_to_name(args.name) is None:
        sys.exit(1)


def cmd_send(args):
    """Type a command line into a session."""
    activator = _make_activator(args)
    text = " ".join(args.text)
    if args.session:
        session = activator.registry.find_by_name(args.session)
        if session is None:
            activator.report(f"No such session: {args.session}")
            sys.exit(1)
        activator.host.send_line(session.handle, text)
    elif not activator.send_shell_command(text):
        sys.exit(1)


def cmd_list(args):
    """List live sessions."""
    activator = _make_activator(args)
    sessions = activator.registry.list_live()
    if not sessions:
        print("No live sessions.")
        return

    last = activator.registry.last_focused_name
    for session in sessions:
        tagged = activator.registry.association(session.name)
        marker = "*" if session.name == last else " "
        where = f"  {tagged.root}" if tagged else ""
        print(f"{marker} {session.name:<30} {session.handle:<6}{where}")


def cmd_bind(args):
    """Bind the key palette in tmux (or print tmux.conf lines)."""
    settings = config.get_settings()
    keys = args.keys.split(",") if args.keys else list(settings["keys"])
    term_keys = args.term_keys.split(",") if args.term_keys else list(settings["term_keys"])
    table = args.table or settings["key_table"]
    config_path = Path(args.config).expanduser().resolve() if args.config else None

    if args.print:
        pairs = binding_commands(keys, term_keys, config_path, global_modifier=settings["global_modifier"])
        for line in tmux_conf_lines(pairs, table):
            print(line)
        return

    pairs = setup(
        _make_host(settings),
        keys,
        term_keys,
        config_path,
        table=table,
        global_modifier=settings["global_modifier"],
    )
    print(f"Bound {len(pairs)} keys in table '{table}'.")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="shellpad",
        description="Per-project palettes of persistent tmux shell sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", help="Settings file (default: $SHELLPAD_CONFIG or ~/.config/shellpad/config.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    activate_parser = subparsers.add_parser("activate", help="Switch to or create the session for a key")
    activate_parser.add_argument("key", help="Key identifier, e.g. 1")
    activate_parser.add_argument(
        "--global", "-g", dest="global_", action="store_true", help="Use the global (non-project) palette"
    )
    activate_parser.add_argument("--term", action="store_true", help="Default to a terminal session for this key")
    activate_parser.add_argument("--project", "-p", help="Project name (default: detected)")
    activate_parser.add_argument("--root", "-r", help="Project root (default: detected)")
    activate_parser.add_argument("--cwd", help="Directory to detect the project from")
    activate_parser.set_defaults(func=cmd_activate)

    last_parser = subparsers.add_parser("last", help="Switch to the last focused session")
    last_parser.set_defaults(func=cmd_last)

    switch_parser = subparsers.add_parser("switch", help="Switch to a session by name")
    switch_parser.add_argument("name", help="Canonical name, e.g. 1.build.kernel")
    switch_parser.set_defaults(func=cmd_switch)

    send_parser = subparsers.add_parser("send", help="Type a command into a session")
    send_parser.add_argument("text", nargs="+", help="Command line to send")
    send_parser.add_argument("--session", "-s", help="Target session (default: current)")
    send_parser.set_defaults(func=cmd_send)

    list_parser = subparsers.add_parser("list", help="List live sessions")
    list_parser.set_defaults(func=cmd_list)

    bind_parser = subparsers.add_parser("bind", help="Bind the key palette in tmux")
    bind_parser.add_argument("--keys", help="Comma-separated keys (default: from settings)")
    bind_parser.add_argument("--term-keys", help="Comma-separated terminal keys (default: from settings)")
    bind_parser.add_argument("--table", "-T", help="tmux key table (default: from settings)")
    bind_parser.add_argument("--print", action="store_true", help="Print tmux.conf lines instead of binding")
    bind_parser.set_defaults(func=cmd_bind)

    args = parser.parse_args(argv)

    if args.config:
        config.init(Path(args.config))
    settings = config.get_settings()
    level = logging.DEBUG if args.verbose else getattr(logging, str(settings["log_level"]).upper(), logging.INFO)
    try:
        setup_process_logging("shellpad", level=level, console=args.verbose)
    except OSError:
        setup_process_logging("shellpad", level=level, console=args.verbose, file=False)

    try:
        args.func(args)
    except (ShellpadError, OSError, ValueError, RuntimeError) as e:
        # One line for the user, full detail in the log
        logger.exception("%s failed", args.command)
        print(f"Error: {e}", file=sys.stderr)
        TmuxHost().message(f"shellpad: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

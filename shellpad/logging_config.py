"""Logging setup shared by every shellpad command.

Log files live under {state_dir}/logs: {name}.log rolls over at midnight,
{name}-current.log rolls over by size. Modules take a logger with
get_logger(__name__); cli.main() installs the handlers once per run.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] [{tag}] [%(levelname)s] %(name)s: %(message)s"
DAILY_BACKUPS = 14
SIZE_LIMIT = 5 * 1024 * 1024
SIZE_BACKUPS = 5


def state_dir() -> Path:
    """$XDG_STATE_HOME/shellpad, or ~/.local/state/shellpad."""
    base = os.environ.get("XDG_STATE_HOME") or os.path.expanduser("~/.local/state")
    return Path(base) / "shellpad"


class FlushingStreamHandler(logging.StreamHandler):
    """Flush stderr on every record; a key-press run may exit right after."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def setup_process_logging(
    process_name: str,
    level: int = logging.INFO,
    console: bool = True,
    file: bool = True,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Replace the root logger's handlers and return the root logger.

    console adds a stderr handler; file adds the two rotating files under
    log_dir (default {state_dir}/logs). Raises OSError if log_dir cannot be
    created, so the caller can retry with file=False.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    fmt = LOG_FORMAT.format(tag=process_name)
    handlers: list[logging.Handler] = []

    if console:
        stream = FlushingStreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))
        handlers.append(stream)

    if file:
        log_dir = log_dir or state_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        file_fmt = logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

        daily = TimedRotatingFileHandler(
            log_dir / f"{process_name}.log",
            when="midnight",
            backupCount=DAILY_BACKUPS,
            encoding="utf-8",
        )
        daily.suffix = "%Y-%m-%d"
        daily.setFormatter(file_fmt)
        handlers.append(daily)

        sized = RotatingFileHandler(
            log_dir / f"{process_name}-current.log",
            maxBytes=SIZE_LIMIT,
            backupCount=SIZE_BACKUPS,
            encoding="utf-8",
        )
        sized.setFormatter(file_fmt)
        handlers.append(sized)

    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

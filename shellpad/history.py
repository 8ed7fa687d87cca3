"""Scoped history-file environment for session creation.

The host reads the variable while it spawns the shell, so it only has to
hold for the duration of the create call. The variable is process-wide:
activations must stay serialized for this to be correct.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)

HISTORY_ENV_VAR = "HISTFILE"
HISTORY_FILE_NAME = "history"


@contextmanager
def history_file(
    session_dir: Path,
    file_name: str = HISTORY_FILE_NAME,
    env_var: str = HISTORY_ENV_VAR,
) -> Iterator[Path]:
    """Point ``env_var`` at ``session_dir/file_name`` until the block exits."""
    path = Path(session_dir) / file_name
    previous = os.environ.get(env_var)
    os.environ[env_var] = str(path)
    logger.debug("%s=%s", env_var, path)
    try:
        yield path
    finally:
        if previous is None:
            os.environ.pop(env_var, None)
        else:
            os.environ[env_var] = previous

"""On-disk session directories: {session_root}/{project}/{key}/.

Each directory holds the shell's history file and nothing else. Directories
are created on first activation and never removed.
"""

import os
from pathlib import Path

from .errors import DirectoryCreationError
from .logging_config import get_logger
from .types import EMPTY_PROJECT

logger = get_logger(__name__)

SEPARATOR_TOKEN = "%2F"
DOT_TOKEN = "%2E"
# Sanitized segments never start with ".", so no project can claim this one
GLOBAL_DIR_NAME = ".global"


def sanitize_key(key: str) -> str:
    """Make a key a single path component that stays inside its parent.

    Path separators become %2F and a leading "." becomes %2E, so neither
    "a/b" nor ".." can nest or climb out of the project directory.
    """
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    for sep in separators:
        key = key.replace(sep, SEPARATOR_TOKEN)
    if key.startswith("."):
        key = DOT_TOKEN + key[1:]
    return key


def session_dir_path(session_root: Path, project: str, key: str) -> Path:
    """Compute (without creating) the session directory for a project and key."""
    segment = GLOBAL_DIR_NAME if project == EMPTY_PROJECT else sanitize_key(project)
    root = Path(session_root).expanduser()
    return (root / segment / sanitize_key(key)).absolute()


def ensure_session_dir(session_root: Path, project: str, key: str) -> Path:
    """Create the session directory if missing and return its absolute path.

    Raises DirectoryCreationError when the filesystem refuses (permissions,
    or a file already sitting at one of the path components).
    """
    path = session_dir_path(session_root, project, key)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(e.errno, f"Cannot create session directory: {e.strerror}", str(path)) from e
    logger.debug("Session directory ready: %s", path)
    return path

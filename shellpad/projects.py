"""Project detection: which project the user is working in, and where it lives.

The default provider asks git for the enclosing repository; outside a
repository it reports the empty project rooted at the home directory.
"""

import subprocess
from pathlib import Path
from typing import Protocol

from .logging_config import get_logger
from .types import EMPTY_PROJECT

logger = get_logger(__name__)

GIT_TIMEOUT = 5  # seconds


class ProjectProvider(Protocol):
    def project_name(self) -> str: ...

    def project_root(self) -> Path: ...


class StaticProjectProvider:
    """Fixed project, e.g. from command-line flags."""

    def __init__(self, project: str, root: Path):
        self.project = project
        self.root = Path(root)

    def project_name(self) -> str:
        return self.project

    def project_root(self) -> Path:
        return self.root


class GitProjectProvider:
    """Project = top-level directory of the git work tree containing cwd."""

    def __init__(self, cwd: Path | None = None):
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self._toplevel: Path | None = None
        self._looked_up = False

    def _git_toplevel(self) -> Path | None:
        if self._looked_up:
            return self._toplevel
        self._looked_up = True
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("git lookup in %s failed: %s", self.cwd, e)
            return None
        if result.returncode == 0 and result.stdout.strip():
            self._toplevel = Path(result.stdout.strip())
        return self._toplevel

    def project_name(self) -> str:
        toplevel = self._git_toplevel()
        return toplevel.name if toplevel else EMPTY_PROJECT

    def project_root(self) -> Path:
        toplevel = self._git_toplevel()
        return toplevel if toplevel else Path.home()

"""Turn a (key, project) request into a focused live session.

activate_for_key() resolves the shell spec for the key, derives the
canonical name and either focuses the live session of that name (switch
path: no directory work, no environment changes) or creates one:

  1. ensure {session_root}/{project}/{key}/ exists
  2. with HISTFILE pointing into it, ask the host for a new session
  3. once the session is ready: run the init hook, re-exec the preferred
     shell in TERMINAL sessions, tag the session with its project
  4. register and focus it

Any failure aborts the whole activation; nothing is registered and the
history variable is restored. Pressing the key again retries.
"""

from pathlib import Path
from typing import Any

from .config import resolve_shell_spec, session_root
from .history import history_file
from .logging_config import get_logger
from .projects import GitProjectProvider, ProjectProvider
from .quoting import preferred_shell, reexec_command_line
from .registry import SessionRegistry
from .session_dir import ensure_session_dir, sanitize_key
from .types import EMPTY_PROJECT, ProjectConfig, ProjectContext, Session, ShellKind, ShellSpec, canonical_name

logger = get_logger(__name__)

NO_SESSIONS_MESSAGE = "No shell sessions available"
NO_TARGET_MESSAGE = "No shell session to send to"


class Activator:
    """Resolves key presses to sessions through a SessionRegistry."""

    def __init__(
        self,
        registry: SessionRegistry,
        settings: dict[str, Any],
        project_config: ProjectConfig | None = None,
        provider: ProjectProvider | None = None,
    ):
        self.registry = registry
        self.host = registry.host
        self.settings = settings
        self.project_config: ProjectConfig = project_config or {}
        self.provider: ProjectProvider = provider or GitProjectProvider()
        # Project of the session the user was last sent to
        self.current_project: ProjectContext | None = None
        # Handle of the session whose on_ready callback is running
        self._initializing: str | None = None

    def replace_config(self, project_config: ProjectConfig) -> None:
        """Swap in a new project table. Live sessions are unaffected."""
        self.project_config = project_config

    # --- Activation ---

    def activate_for_key(
        self,
        key: str,
        project: str | None = None,
        project_root: Path | None = None,
        global_: bool = False,
        term: bool | None = None,
    ) -> Session:
        """Focus the session for key in project, creating it if needed.

        global_ selects the empty project regardless of the detected one.
        term overrides whether key defaults to a TERMINAL session (None:
        use settings["term_keys"]).
        """
        key = sanitize_key(key)
        if global_:
            project = EMPTY_PROJECT
        context = self._resolve_context(project, project_root)

        spec = resolve_shell_spec(
            self.project_config,
            context.project,
            key,
            self.settings["default_shell_name"],
            context.root,
            self.settings["term_keys"] if term is None else ([key] if term else []),
        )
        name = canonical_name(key, spec.name, context.project)

        existing = self.registry.find_by_name(name)
        if existing is not None:
            self.registry.focus(existing)
            self.current_project = context
            return existing

        return self._create(key, name, spec, context)

    def _resolve_context(self, project: str | None, project_root: Path | None) -> ProjectContext:
        """Fill in project and root from the current session's tag or the provider.

        The empty project is always rooted at the home directory.
        """
        current = self.registry.find_by_handle(self.host.current_handle())
        tagged = self.registry.association(current.name) if current else None

        if project is None:
            project = tagged.project if tagged else self.provider.project_name()

        if project == EMPTY_PROJECT:
            return ProjectContext(EMPTY_PROJECT, Path.home())
        if project_root is not None:
            return ProjectContext(project, Path(project_root).expanduser())
        if tagged is not None and tagged.project == project:
            return ProjectContext(project, tagged.root)
        return ProjectContext(project, self.provider.project_root())

    def _create(self, key: str, name: str, spec: ShellSpec, context: ProjectContext) -> Session:
        session_dir = ensure_session_dir(session_root(self.settings), context.project, key)

        def on_ready(handle: str) -> None:
            self._initializing = handle
            try:
                if spec.init_hook is not None:
                    spec.init_hook(session_dir)
                if spec.kind == ShellKind.TERMINAL:
                    self.host.send_line(handle, self.reexec_line())
                self.host.tag(handle, context.project, context.root)
            finally:
                self._initializing = None

        with history_file(
            session_dir,
            self.settings["history_file_name"],
            self.settings["history_env_var"],
        ):
            handle = self.host.create_session(name, spec.directory, spec.kind, on_ready)

        session = Session(name=name, handle=handle)
        self.registry.register(session)
        self.registry.associate(name, context.project, context.root)
        logger.info(f"Created session {name} in {spec.directory} ({spec.kind.value})")

        self.registry.focus(session)
        self.current_project = context
        return session

    def reexec_line(self) -> str:
        """Command line that replaces a TERMINAL session's bootstrap shell."""
        shell = preferred_shell(self.settings.get("shell"), host_default=self.host.default_shell())
        return reexec_command_line(shell, self.settings.get("shell_args") or ())

    # --- Switching ---

    def switch_to_last(self) -> Session | None:
        """Focus the last-focused live session, reporting when there is none."""
        session = self.registry.last_focused()
        if session is None:
            self.report(NO_SESSIONS_MESSAGE)
            return None
        self._focus(session)
        return session

    def switch_to_name(self, name: str) -> Session | None:
        """Focus the live session called name, reporting when there is none."""
        session = self.registry.find_by_name(name)
        if session is None:
            self.report(f"No such session: {name}")
            return None
        self._focus(session)
        return session

    def _focus(self, session: Session) -> None:
        self.registry.focus(session)
        tagged = self.registry.association(session.name)
        if tagged is not None:
            self.current_project = tagged

    # --- Typing into sessions ---

    def send_shell_command(self, cmdline: str) -> bool:
        """Type a command into the session being initialized, else the current one.

        Returns False (after telling the user) when there is no target.
        DeadSessionError propagates if the target died in the meantime.
        """
        handle = self._initializing
        if handle is None:
            current = self.registry.find_by_handle(self.host.current_handle())
            handle = current.handle if current else None
        if handle is None:
            self.report(NO_TARGET_MESSAGE)
            return False
        self.host.send_line(handle, cmdline)
        return True

    def report(self, text: str) -> None:
        """Log a user-facing notice and show it in the host."""
        logger.info(text)
        self.host.message(text)

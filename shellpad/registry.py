"""Session registry: the set of live shellpad sessions.

Liveness is polled from the host: every list_live() call drops handles the
host no longer reports as live, so a dead session's name is free for the
next activation. The registry also keeps the project association of each
session and the name of the most recently focused session.

Nothing here is persisted. A fresh registry is empty until rediscover()
pulls tagged sessions back from the host.
"""

from pathlib import Path

from .host import SessionHost
from .logging_config import get_logger
from .types import ProjectContext, Session

logger = get_logger(__name__)


class SessionRegistry:
    """Live sessions, their project associations and the last-focused name.

    Operations are not locked: activations are driven by sequential key
    presses. Concurrent callers would have to serialize list_live() and
    register() to keep names unique among live sessions.
    """

    def __init__(self, host: SessionHost):
        self.host = host
        self._sessions: list[Session] = []
        self._associations: dict[str, ProjectContext] = {}
        self.last_focused_name: str | None = None

    def rediscover(self) -> list[Session]:
        """Load tagged sessions and the last-focused marker from the host."""
        known = {s.name for s in self._sessions}
        for found in self.host.discover():
            if found.name in known:
                continue
            self._sessions.append(Session(name=found.name, handle=found.handle))
            known.add(found.name)
            if found.project is not None and found.root is not None:
                self._associations[found.name] = ProjectContext(found.project, found.root)
        if self.last_focused_name is None:
            self.last_focused_name = self.host.load_marker()
        return self.list_live()

    def list_live(self) -> list[Session]:
        """Return live sessions in registration order, pruning dead ones."""
        live = []
        for session in self._sessions:
            if self.host.is_live(session.handle):
                live.append(session)
            else:
                logger.debug("Pruning dead session %s (%s)", session.name, session.handle)
                self._associations.pop(session.name, None)
        self._sessions = live
        return list(live)

    def find_by_name(self, name: str) -> Session | None:
        for session in self.list_live():
            if session.name == name:
                return session
        return None

    def find_by_handle(self, handle: str | None) -> Session | None:
        if handle is None:
            return None
        for session in self.list_live():
            if session.handle == handle:
                return session
        return None

    def register(self, session: Session) -> None:
        """Add a newly created session. Its name must not be live already."""
        if self.find_by_name(session.name) is not None:
            raise ValueError(f"Session {session.name} is already live")
        self._sessions.append(session)
        logger.info(f"Registered session {session.name} ({session.handle})")

    def focus(self, session: Session) -> None:
        """Bring a session to the front.

        The name is only recorded as last focused when the user was already
        in a tracked session, so jumps in from elsewhere don't move it.
        """
        prior = self.find_by_handle(self.host.current_handle())
        self.host.focus(session.handle)
        if prior is not None:
            self.last_focused_name = session.name
            self.host.store_marker(session.name)
        logger.info(f"Focused session {session.name}")

    def last_focused(self) -> Session | None:
        """The last-focused session if still live, else the first live one."""
        if self.last_focused_name is not None:
            session = self.find_by_name(self.last_focused_name)
            if session is not None:
                return session
        live = self.list_live()
        return live[0] if live else None

    # --- Project associations ---

    def associate(self, name: str, project: str, root: Path) -> None:
        """Remember which project a session belongs to."""
        self._associations[name] = ProjectContext(project, Path(root))

    def association(self, name: str) -> ProjectContext | None:
        return self._associations.get(name)

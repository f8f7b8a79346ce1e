"""
Session table shared by the MCP route.

SessionStore is the interface the router writes through; the default
InMemorySessionStore keeps entries in a plain dict for the process
lifetime. A distributed backend can be swapped in by implementing the
same methods.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from models.session import Session


class SessionExistsError(KeyError):
    """Raised when a session id is inserted twice."""


class SessionStore(ABC):

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    def add(self, session: Session) -> None:
        ...

    @abstractmethod
    def remove(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    def values(self) -> Iterator[Session]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __contains__(self, session_id: object) -> bool:
        return isinstance(session_id, str) and self.get(session_id) is not None


class InMemorySessionStore(SessionStore):

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def add(self, session: Session) -> None:
        if session.session_id in self._sessions:
            raise SessionExistsError(session.session_id)
        self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> Optional[Session]:
        return self._sessions.pop(session_id, None)

    def values(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)


sessions: SessionStore = InMemorySessionStore()

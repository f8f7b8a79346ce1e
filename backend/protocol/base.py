"""
Protocol handler contract.

A protocol handler owns the MCP exchange for exactly one client session.
The session router only relies on this interface:

  - construction through a HandlerFactory, given a session-id generator and
    a confirmation callback fired once the id is final
  - start(task_group)   spawn any background work the handler needs
  - handle_request(...) process one HTTP exchange (raw ASGI triple)
  - close listeners     notified exactly once with a SessionClosed event
  - aclose()            release resources; idempotent
"""

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from anyio.abc import TaskGroup
from starlette.types import Receive, Scope, Send

logger = logging.getLogger(__name__)


class SessionStatus(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class SessionClosed:
    """Emitted once when a handler shuts down.

    session_id is None when the handler never allocated an identifier.
    """

    session_id: Optional[str]
    handler: "ProtocolHandler"
    reason: str     # "terminated" | "transport_closed" | "error"


SessionIdGenerator = Callable[[], str]
SessionInitializedCallback = Callable[[str], None]
CloseListener = Callable[[SessionClosed], Awaitable[None]]


class ProtocolHandler(ABC):
    """Base class for per-session handlers.

    Subclasses call _confirm_session() when the client has been handed its
    session id, and _emit_closed() when the session ends. Both are guarded
    so the router sees each transition at most once.
    """

    def __init__(
        self,
        session_id_generator: SessionIdGenerator,
        on_session_initialized: SessionInitializedCallback,
    ):
        self._session_id_generator = session_id_generator
        self._on_session_initialized = on_session_initialized
        self._close_listeners: list[CloseListener] = []
        self._session_id: Optional[str] = None
        self.status = SessionStatus.UNINITIALIZED

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def closed(self) -> bool:
        return self.status is SessionStatus.CLOSED

    def add_close_listener(self, listener: CloseListener) -> None:
        self._close_listeners.append(listener)

    def _allocate_session_id(self) -> str:
        if self._session_id is None:
            self._session_id = self._session_id_generator()
        return self._session_id

    def _confirm_session(self) -> None:
        if self.status is not SessionStatus.UNINITIALIZED or self._session_id is None:
            return
        self.status = SessionStatus.ACTIVE
        self._on_session_initialized(self._session_id)

    async def _emit_closed(self, reason: str) -> None:
        if self.closed:
            return
        self.status = SessionStatus.CLOSED
        logger.debug("Handler for session %s closing (%s)", self._session_id, reason)
        event = SessionClosed(session_id=self._session_id, handler=self, reason=reason)
        for listener in self._close_listeners:
            await listener(event)

    @abstractmethod
    async def start(self, task_group: TaskGroup) -> None:
        ...

    @abstractmethod
    async def handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        parsed_body: Any = None,
    ) -> None:
        ...

    @abstractmethod
    async def aclose(self) -> None:
        ...


HandlerFactory = Callable[[SessionIdGenerator, SessionInitializedCallback], ProtocolHandler]

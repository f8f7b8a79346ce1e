"""
MCP endpoint: session routing for the Streamable HTTP transport.

Every request to the MCP path passes through SessionRouter, which picks one
of three dispositions for a POST:

  continuing  session header matches a live session -> reuse its handler
  new         no header + initialize request        -> build a handler
  invalid     anything else                         -> 400 JSON-RPC error

GET and DELETE only ever reach an existing session.

The router is the only writer of the session table. Entries are inserted
when a handler confirms its session id and removed when it reports that
the session closed.
"""

import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import anyio
from anyio.abc import TaskGroup
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

import store
from config import SESSION_ID_HEADER
from models.jsonrpc import invalid_session_error
from models.session import Session
from protocol.base import HandlerFactory, ProtocolHandler, SessionClosed, SessionIdGenerator
from protocol.classifier import InitiationClassifier, is_initialize_request

logger = logging.getLogger(__name__)

MCP_METHODS = ["POST", "GET", "DELETE"]


def generate_session_id() -> str:
    return uuid.uuid4().hex


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Hand the already-read body to the next consumer, then defer to receive."""
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class SessionRouter:
    """ASGI app routing MCP requests to per-session protocol handlers."""

    def __init__(
        self,
        handler_factory: HandlerFactory,
        session_store: Optional[store.SessionStore] = None,
        classifier: InitiationClassifier = is_initialize_request,
        session_id_generator: SessionIdGenerator = generate_session_id,
    ):
        self.handler_factory = handler_factory
        self.store = session_store if session_store is not None else store.sessions
        self.classifier = classifier
        self.session_id_generator = session_id_generator
        self._task_group: Optional[TaskGroup] = None

    # ---------- Lifecycle ----------

    @asynccontextmanager
    async def run(self) -> AsyncIterator["SessionRouter"]:
        """Own the task group that per-session handler tasks run in."""
        if self._task_group is not None:
            raise RuntimeError("SessionRouter.run() is already active")
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Session router started")
            try:
                yield self
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
        logger.info("Session router stopped (%d sessions left)", len(self.store))

    # ---------- ASGI entry ----------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._task_group is None:
            raise RuntimeError("SessionRouter is not running; enter run() first")

        method = scope["method"]
        if method == "POST":
            await self.handle_post(scope, receive, send)
        else:
            await self.handle_session_request(scope, receive, send)

    # ---------- POST ----------

    async def handle_post(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        raw_body = await request.body()
        body = self._parse_json(raw_body)
        receive = _replay_body(raw_body, receive)

        session_id = request.headers.get(SESSION_ID_HEADER)
        session = self.store.get(session_id) if session_id else None

        if session is not None:
            await self._delegate(session.handler, scope, receive, send, body)
            return

        if not session_id and self.classifier(body):
            await self._initiate_session(scope, receive, send, body)
            return

        logger.debug("Rejected POST without a valid session (header=%r)", session_id)
        response = JSONResponse(invalid_session_error().model_dump(), status_code=400)
        await response(scope, receive, send)

    async def _initiate_session(
        self, scope: Scope, receive: Receive, send: Send, body: Any
    ) -> None:
        handler: Optional[ProtocolHandler] = None

        def on_session_initialized(session_id: str) -> None:
            self.store.add(Session(session_id=session_id, handler=handler))
            logger.info("Session %s initialized (%d active)", session_id, len(self.store))

        handler = self.handler_factory(self.session_id_generator, on_session_initialized)
        handler.add_close_listener(self._on_session_closed)
        await handler.start(self._task_group)

        try:
            await self._delegate(handler, scope, receive, send, body)
        finally:
            if not self._owns_entry(handler) and not handler.closed:
                # The handler answered without confirming a session
                logger.warning("Releasing handler that never confirmed a session")
                await handler.aclose()

    # ---------- GET / DELETE ----------

    async def handle_session_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(SESSION_ID_HEADER)
        session = self.store.get(session_id) if session_id else None

        if session is None:
            logger.debug("Rejected %s without a valid session (header=%r)", scope["method"], session_id)
            response = PlainTextResponse("Invalid or missing session ID", status_code=400)
            await response(scope, receive, send)
            return

        await self._delegate(session.handler, scope, receive, send, None)

    # ---------- Helpers ----------

    async def _delegate(
        self,
        handler: ProtocolHandler,
        scope: Scope,
        receive: Receive,
        send: Send,
        body: Any,
    ) -> None:
        try:
            await handler.handle_request(scope, receive, send, body)
        except Exception:
            logger.exception("Handler failed for session %s", handler.session_id)
            raise

    async def _on_session_closed(self, event: SessionClosed) -> None:
        if event.session_id is not None and self._owns_entry(event.handler):
            self.store.remove(event.session_id)
            logger.info(
                "Session %s closed (%s, %d active)",
                event.session_id, event.reason, len(self.store),
            )
        await event.handler.aclose()

    def _owns_entry(self, handler: ProtocolHandler) -> bool:
        if handler.session_id is None:
            return False
        session = self.store.get(handler.session_id)
        return session is not None and session.handler is handler

    @staticmethod
    def _parse_json(raw_body: bytes) -> Any:
        if not raw_body:
            return None
        try:
            return json.loads(raw_body)
        except ValueError:
            return None

"""
MCP session handler backed by the SDK's Streamable HTTP transport.

Each instance pairs one StreamableHTTPServerTransport with a dedicated
low-level Server. The server loop runs as a task in the router's task group
for as long as the transport stays open.

The session is confirmed the moment the transport starts a successful
response that carries the session id header, i.e. right before the client
can learn the id.
"""

import logging
from typing import Any, Callable, Optional

import anyio
from anyio.abc import TaskGroup
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from mcp.server.transport_security import TransportSecuritySettings
from starlette.types import Message, Receive, Scope, Send

from config import SESSION_ID_HEADER
from protocol.base import (
    ProtocolHandler,
    SessionIdGenerator,
    SessionInitializedCallback,
    SessionStatus,
)
from tools.random_number import create_random_number_server

logger = logging.getLogger(__name__)


class McpSessionHandler(ProtocolHandler):

    def __init__(
        self,
        session_id_generator: SessionIdGenerator,
        on_session_initialized: SessionInitializedCallback,
        *,
        json_response: bool = False,
        security_settings: Optional[TransportSecuritySettings] = None,
        server_factory: Callable[[], Server] = create_random_number_server,
    ):
        super().__init__(session_id_generator, on_session_initialized)
        # The transport needs its id up front; it is only published once
        # the initialize response goes out.
        self._transport = StreamableHTTPServerTransport(
            mcp_session_id=self._allocate_session_id(),
            is_json_response_enabled=json_response,
            security_settings=security_settings,
        )
        self._server = server_factory()

    async def start(self, task_group: TaskGroup) -> None:
        await task_group.start(self._run_server)

    async def _run_server(self, *, task_status=anyio.TASK_STATUS_IGNORED) -> None:
        reason = "transport_closed"
        try:
            async with self._transport.connect() as (read_stream, write_stream):
                task_status.started()
                try:
                    await self._server.run(
                        read_stream,
                        write_stream,
                        self._server.create_initialization_options(),
                        stateless=False,
                    )
                except Exception:
                    logger.exception("MCP server loop crashed for session %s", self.session_id)
                    reason = "error"
        finally:
            with anyio.CancelScope(shield=True):
                await self._emit_closed(reason)

    async def handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        parsed_body: Any = None,
    ) -> None:
        await self._transport.handle_request(scope, receive, self._confirming_send(send))
        if self._transport.is_terminated:
            # DELETE, or the transport gave up on its own
            await self._emit_closed("terminated")

    async def aclose(self) -> None:
        if not self._transport.is_terminated:
            await self._transport.terminate()

    def _confirming_send(self, send: Send) -> Send:
        async def wrapped(message: Message) -> None:
            if (
                message["type"] == "http.response.start"
                and self.status is SessionStatus.UNINITIALIZED
                and message["status"] < 400
                and self._carries_session_id(message)
            ):
                self._confirm_session()
            await send(message)

        return wrapped

    def _carries_session_id(self, message: Message) -> bool:
        expected = (self.session_id or "").encode("latin-1")
        for name, value in message.get("headers", []):
            if name.lower() == SESSION_ID_HEADER.encode("latin-1") and value == expected:
                return True
        return False


def mcp_handler_factory(
    *,
    json_response: bool = False,
    allowed_hosts: Optional[list[str]] = None,
) -> Callable[[SessionIdGenerator, SessionInitializedCallback], McpSessionHandler]:
    """Bind transport options once; the router calls the result per session."""
    security_settings = None
    if allowed_hosts:
        security_settings = TransportSecuritySettings(
            enable_dns_rebinding_protection=True,
            allowed_hosts=allowed_hosts,
        )

    def factory(
        session_id_generator: SessionIdGenerator,
        on_session_initialized: SessionInitializedCallback,
    ) -> McpSessionHandler:
        return McpSessionHandler(
            session_id_generator,
            on_session_initialized,
            json_response=json_response,
            security_settings=security_settings,
        )

    return factory

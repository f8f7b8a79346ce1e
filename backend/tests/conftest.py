import pytest
from fastapi.testclient import TestClient

from main import create_app
from routes.mcp import SessionRouter
from store import InMemorySessionStore
from tests.fakes import FakeHandlerFactory


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def handler_factory():
    return FakeHandlerFactory()


@pytest.fixture
def session_router(handler_factory):
    router = SessionRouter(handler_factory, session_store=InMemorySessionStore())
    handler_factory.router = router
    return router


@pytest.fixture
def client(session_router):
    with TestClient(create_app(session_router)) as test_client:
        yield test_client

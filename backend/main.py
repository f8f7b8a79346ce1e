from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from protocol.mcp_handler import mcp_handler_factory
from routes.mcp import MCP_METHODS, SessionRouter

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(session_router: Optional[SessionRouter] = None) -> FastAPI:
    if session_router is None:
        session_router = SessionRouter(
            mcp_handler_factory(
                json_response=config.JSON_RESPONSE,
                allowed_hosts=config.ALLOWED_HOSTS,
            )
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with session_router.run():
            yield

    app = FastAPI(title="Random Number MCP Server", version=config.SERVER_VERSION, lifespan=lifespan)
    app.state.session_router = session_router

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_methods=MCP_METHODS,
        allow_headers=["*"],
        expose_headers=[config.SESSION_ID_HEADER],
    )

    app.add_route(config.MCP_PATH, session_router, methods=MCP_METHODS, include_in_schema=False)

    @app.get("/")
    def health():
        return {
            "status": "ok",
            "service": config.SERVER_NAME,
            "active_sessions": len(session_router.store),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "MCP Random Number server listening on http://localhost:%d%s",
        config.PORT, config.MCP_PATH,
    )
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())

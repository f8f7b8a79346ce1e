"""
Server configuration.

All values come from environment variables (a local .env is loaded by
main.py before this module is imported).

  PORT=3000
  MCP_PATH=/mcp
  MCP_JSON_RESPONSE=true
  MCP_ALLOWED_HOSTS=127.0.0.1:3000,localhost:3000
"""

import os


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# ─── Server identity ───────────────────────────────────────────────────

SERVER_NAME = "random-server"
SERVER_VERSION = "1.0.0"

# ─── HTTP ──────────────────────────────────────────────────────────────

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
MCP_PATH = os.environ.get("MCP_PATH", "/mcp")
ALLOWED_ORIGINS = _csv(os.environ.get("ALLOWED_ORIGINS", "*"))

# Header name is case-insensitive on the wire; Starlette lowercases it.
SESSION_ID_HEADER = "mcp-session-id"

# ─── Transport ─────────────────────────────────────────────────────────

# Plain JSON replies instead of an SSE stream for POST requests
JSON_RESPONSE = _flag(os.environ.get("MCP_JSON_RESPONSE", ""))

# Non-empty list turns on DNS-rebinding protection in the transport
ALLOWED_HOSTS = _csv(os.environ.get("MCP_ALLOWED_HOSTS", ""))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

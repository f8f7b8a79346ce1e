"""
The `random-number` tool.

Every session gets its own low-level MCP Server instance built here, so no
protocol state is shared between clients.
"""

import random
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server

from config import SERVER_NAME, SERVER_VERSION

TOOL_NAME = "random-number"

RANDOM_NUMBER_TOOL = types.Tool(
    name=TOOL_NAME,
    title="Random Number",
    description="Return a random floating-point number between 0 and a given maximum.",
    inputSchema={
        "type": "object",
        "properties": {
            "max": {
                "type": "integer",
                "description": "The upper bound for the random number.",
            },
        },
        "required": ["max"],
    },
)


def random_number(max_value: int) -> float:
    return random.random() * max_value


async def list_tools() -> list[types.Tool]:
    return [RANDOM_NUMBER_TOOL]


async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
    if name != TOOL_NAME:
        raise ValueError(f"Unknown tool: {name}")
    value = random_number(arguments["max"])
    return [types.TextContent(type="text", text=str(value))]


def create_random_number_server() -> Server:
    """Build a fresh MCP server exposing only the random-number tool."""
    server = Server(SERVER_NAME, version=SERVER_VERSION)
    server.list_tools()(list_tools)
    server.call_tool()(call_tool)
    return server

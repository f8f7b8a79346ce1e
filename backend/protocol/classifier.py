"""
Initiation-message classifier.

The router only needs a predicate: "does this parsed body ask for a new
session?". The default implementation validates the body against the MCP
SDK's JSON-RPC request and initialize-params models.
"""

from typing import Any, Callable

from mcp import types
from pydantic import ValidationError

InitiationClassifier = Callable[[Any], bool]


def is_initialize_request(body: Any) -> bool:
    """True for a single JSON-RPC `initialize` request with valid params."""
    if not isinstance(body, dict):
        return False
    try:
        request = types.JSONRPCRequest.model_validate(body)
    except ValidationError:
        return False
    if request.method != "initialize":
        return False
    try:
        types.InitializeRequestParams.model_validate(request.params or {})
    except ValidationError:
        return False
    return True

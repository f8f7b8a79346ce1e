from models.jsonrpc import JSONRPCErrorDetail, JSONRPCErrorResponse, invalid_session_error
from models.session import Session

__all__ = [
    "JSONRPCErrorDetail",
    "JSONRPCErrorResponse",
    "invalid_session_error",
    "Session",
]

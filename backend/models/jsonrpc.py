from typing import Literal, Optional, Union

from pydantic import BaseModel

# Server-defined error in the JSON-RPC reserved range
INVALID_SESSION_CODE = -32000


class JSONRPCErrorDetail(BaseModel):
    code: int
    message: str


class JSONRPCErrorResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    error: JSONRPCErrorDetail
    id: Optional[Union[str, int]] = None


def invalid_session_error() -> JSONRPCErrorResponse:
    return JSONRPCErrorResponse(
        error=JSONRPCErrorDetail(
            code=INVALID_SESSION_CODE,
            message="Bad Request: No valid session ID provided",
        ),
    )

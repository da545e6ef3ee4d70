"""JSON-RPC error codes and the exceptions that map onto them."""
from __future__ import annotations

from typing import Any


class ErrorCode:
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    code: int = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedEnvelope(JsonRpcError):
    code = ErrorCode.INVALID_REQUEST

    def __init__(self, detail: str):
        super().__init__(f"Invalid Request - {detail}")


class UnknownMethod(JsonRpcError):
    code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParams(JsonRpcError):
    code = ErrorCode.INVALID_PARAMS

    def __init__(self, detail: str):
        super().__init__(f"Invalid params - {detail}")


class MissingToolName(InvalidParams):
    def __init__(self):
        super().__init__("tool name is required")


# ---- Tool invocation failures ------------------------------------------------

class ToolError(Exception):
    """Raised by the tool invoker. `is_client_fault` drives the error code."""
    is_client_fault = True


class UnknownTool(ToolError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingParameter(ToolError):
    def __init__(self, key: str):
        super().__init__(f"Missing required parameter: {key}")
        self.key = key


class InvalidParameter(ToolError):
    def __init__(self, key: str, value: Any):
        super().__init__(f"Invalid number format for parameter '{key}': {value}")
        self.key = key
        self.value = value


class InternalToolError(ToolError):
    is_client_fault = False

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"Error executing tool '{name}': {cause}")
        self.name = name
        self.cause = cause

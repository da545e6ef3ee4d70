"""
JSON-RPC 2.0 router for the book tools.

A pure request → response mapping: every input, however malformed, produces a
response object carrying either `result` or `error`. Supported methods:

    - "initialize"  → fixed server identity and capabilities
    - "tools/list"  → the static tool catalog
    - "tools/call"  → runs one tool through the ToolInvoker

Requests without an `id` still get a response (without `id`); there is no
notification suppression.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

from src.mcp.errors import (
    ErrorCode,
    InvalidParams,
    JsonRpcError,
    MalformedEnvelope,
    MissingToolName,
    ToolError,
    UnknownMethod,
)
from src.mcp.invoker import ToolInvoker
from src.mcp.tools import list_tools

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "booktracker-mcp-server", "version": "1.0.0"}


def jsonrpc_result(request_id: Any, result: Any) -> Dict[str, Any]:
    response: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
    if request_id is not None:
        response["id"] = request_id
    response["result"] = result
    return response


def jsonrpc_error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    response: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
    if request_id is not None:
        response["id"] = request_id
    response["error"] = {"code": code, "message": message}
    return response


class JsonRpcRouter:
    def __init__(self, invoker: ToolInvoker):
        self._invoker = invoker

    async def handle(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, Mapping):
            return jsonrpc_error(None, ErrorCode.INVALID_REQUEST, "Invalid Request - request must be a JSON object")

        request_id = request.get("id")
        try:
            method = self._validate_envelope(request)
            result = await self._dispatch(method, request.get("params"))
        except JsonRpcError as e:
            return jsonrpc_error(request_id, e.code, e.message)
        except Exception as e:
            logger.exception("Unhandled error while serving JSON-RPC request")
            return jsonrpc_error(request_id, ErrorCode.INTERNAL_ERROR, f"Internal error: {e}")
        return jsonrpc_result(request_id, result)

    @staticmethod
    def _validate_envelope(request: Mapping[str, Any]) -> str:
        if request.get("jsonrpc") != JSONRPC_VERSION:
            raise MalformedEnvelope("jsonrpc must be 2.0")
        method = request.get("method")
        if not isinstance(method, str):
            raise MalformedEnvelope("method is required")
        return method

    async def _dispatch(self, method: str, params: Any) -> Any:
        if method == "initialize":
            return self._initialize()
        if method == "tools/list":
            return {"tools": [tool.to_schema() for tool in list_tools()]}
        if method == "tools/call":
            return await self._tools_call(params)
        raise UnknownMethod(method)

    @staticmethod
    def _initialize() -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": dict(SERVER_INFO),
        }

    async def _tools_call(self, params: Any) -> Dict[str, Any]:
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise InvalidParams("params must be an object")

        name = params.get("name")
        if name is None:
            raise MissingToolName()
        if not isinstance(name, str):
            raise InvalidParams("tool name must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidParams("arguments must be an object")

        try:
            result = await self._invoker.invoke(name, arguments)
        except ToolError as e:
            if e.is_client_fault:
                raise InvalidParams(str(e)) from e
            raise JsonRpcError(f"Internal error: {e}") from e

        return {"content": [{"type": "text", "text": json.dumps(result)}]}

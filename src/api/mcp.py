import json
import logging

from fastapi import APIRouter, Depends, Request

from src.api.deps import get_router
from src.mcp.errors import ErrorCode
from src.mcp.router import JsonRpcRouter, jsonrpc_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mcp"])


@router.post("/mcp")
async def handle_jsonrpc(request: Request, rpc: JsonRpcRouter = Depends(get_router)):
    """
    JSON-RPC 2.0 entry point for MCP clients.

    Always answers 200 with a JSON-RPC body; protocol problems are reported
    inside the envelope, never as HTTP errors.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.info("Rejecting unparsable JSON-RPC body: %s", e)
        return jsonrpc_error(None, ErrorCode.INVALID_REQUEST, "Invalid Request - body is not valid JSON")
    return await rpc.handle(payload)

"""
Line-delimited JSON-RPC over stdin/stdout.

One request per input line, one response per output line, served by the same
router as the HTTP `/mcp` endpoint. Launch:

    python -m src.mcp.server_stdio
"""
import asyncio
import json
import logging
import sys
from typing import Any, Dict

from src.config import settings
from src.mcp.errors import ErrorCode
from src.mcp.router import JsonRpcRouter, jsonrpc_error

logger = logging.getLogger(__name__)


async def handle_line(rpc: JsonRpcRouter, line: str) -> Dict[str, Any]:
    try:
        request = json.loads(line)
    except json.JSONDecodeError as e:
        logger.info("Rejecting unparsable line: %s", e)
        return jsonrpc_error(None, ErrorCode.INVALID_REQUEST, "Invalid Request - body is not valid JSON")
    return await rpc.handle(request)


async def serve(rpc: JsonRpcRouter, reader: asyncio.StreamReader, write) -> None:
    """Answer requests from `reader` until EOF. `write` receives each response line."""
    while True:
        line = await reader.readline()
        if not line:
            break
        text = line.decode(errors="replace").strip()
        if not text:
            continue
        resp = await handle_line(rpc, text)
        await write(json.dumps(resp) + "\n")


async def stdio_server() -> None:
    from src.database.crud import BookRepository, create_tables
    from src.database.database import SessionLocal, engine
    from src.mcp.invoker import ToolInvoker
    from src.services.book_tools import BookTools

    create_tables(engine)
    tools = BookTools(BookRepository(SessionLocal), max_workers=settings.worker_pool_size)
    # No stream subscribers exist on this transport, so mutations are not broadcast.
    rpc = JsonRpcRouter(ToolInvoker(tools))

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    transport, protocol_w = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
    writer = asyncio.StreamWriter(transport, protocol_w, reader, loop)

    async def write(data: str) -> None:
        writer.write(data.encode())
        await writer.drain()

    logger.info("Stdio JSON-RPC server ready")
    try:
        await serve(rpc, reader, write)
    finally:
        tools.shutdown()


if __name__ == "__main__":
    # stdout carries the protocol, so logs go to stderr.
    logging.basicConfig(level=settings.log_level, stream=sys.stderr, format="%(levelname)s: %(name)s: %(message)s")
    asyncio.run(stdio_server())

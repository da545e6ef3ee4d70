import asyncio
import json

import pytest

from src.mcp.invoker import ToolInvoker
from src.mcp.router import JsonRpcRouter
from src.mcp.server_stdio import serve


async def run_lines(rpc, lines):
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data((line + "\n").encode())
    reader.feed_eof()

    out = []

    async def write(data):
        out.append(data)

    await serve(rpc, reader, write)
    return [json.loads(line) for line in out]


@pytest.mark.asyncio
async def test_one_response_per_request_line(book_tools):
    rpc = JsonRpcRouter(ToolInvoker(book_tools))
    responses = await run_lines(rpc, [
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "initialize"}),
        "",
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/call",
                    "params": {"name": "createBook", "arguments": {"title": "Emma", "author": "Austen", "isbn": "1"}}}),
        "not json",
        json.dumps({"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "getBookById", "arguments": {"id": "x"}}}),
    ])

    assert [r.get("id") for r in responses] == [1, 2, None, 3]
    assert responses[0]["result"]["protocolVersion"] == "2024-11-05"
    assert json.loads(responses[1]["result"]["content"][0]["text"])["title"] == "Emma"
    assert responses[2]["error"]["code"] == -32600
    assert responses[3]["error"]["code"] == -32602

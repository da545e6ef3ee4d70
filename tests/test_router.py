import json

import pytest
from unittest.mock import AsyncMock

from src.mcp.errors import ErrorCode
from src.mcp.invoker import ToolInvoker
from src.mcp.router import JsonRpcRouter
from src.services.book_tools import BookTools


@pytest.fixture
def rpc(book_tools):
    return JsonRpcRouter(ToolInvoker(book_tools))


def call(name, arguments=None, request_id=1):
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}


def tool_payload(response):
    content = response["result"]["content"]
    assert len(content) == 1 and content[0]["type"] == "text"
    return json.loads(content[0]["text"])


# --- envelope ---

@pytest.mark.asyncio
@pytest.mark.parametrize("version", [None, "1.0", 2.0, ""])
async def test_bad_jsonrpc_version(rpc, version):
    request = {"id": 3, "method": "tools/list"}
    if version is not None:
        request["jsonrpc"] = version
    resp = await rpc.handle(request)
    assert resp["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert resp["error"]["message"] == "Invalid Request - jsonrpc must be 2.0"
    assert resp["id"] == 3
    assert "result" not in resp


@pytest.mark.asyncio
async def test_missing_method(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": "abc"})
    assert resp == {
        "jsonrpc": "2.0",
        "id": "abc",
        "error": {"code": -32600, "message": "Invalid Request - method is required"},
    }


@pytest.mark.asyncio
async def test_non_object_request(rpc):
    resp = await rpc.handle([{"jsonrpc": "2.0", "method": "initialize"}])
    assert resp["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert "id" not in resp


@pytest.mark.asyncio
async def test_unknown_method(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": 1, "method": "resources/list"})
    assert resp["error"]["code"] == ErrorCode.METHOD_NOT_FOUND
    assert "resources/list" in resp["error"]["message"]


@pytest.mark.asyncio
async def test_request_without_id_still_answered(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "method": "initialize"})
    assert "id" not in resp
    assert resp["result"]["serverInfo"]["name"] == "booktracker-mcp-server"


# --- methods ---

@pytest.mark.asyncio
async def test_initialize(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": 0, "method": "initialize", "params": {"clientInfo": {}}})
    assert resp["id"] == 0
    assert resp["result"] == {
        "protocolVersion": "2024-11-05",
        "capabilities": {"tools": {}},
        "serverInfo": {"name": "booktracker-mcp-server", "version": "1.0.0"},
    }


@pytest.mark.asyncio
async def test_tools_list(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    tools = resp["result"]["tools"]
    assert len(tools) == 7
    assert all(t["name"] and "inputSchema" in t for t in tools)


@pytest.mark.asyncio
async def test_create_round_trip(rpc):
    resp = await rpc.handle(call("createBook", {"title": "Dune", "author": "Frank Herbert", "isbn": "978"}))
    book = tool_payload(resp)
    assert book["id"] is not None
    assert (book["title"], book["author"], book["isbn"]) == ("Dune", "Frank Herbert", "978")

    listed = tool_payload(await rpc.handle(call("getAllBooks")))
    assert book in listed


@pytest.mark.asyncio
async def test_get_missing_book_is_not_an_error(rpc):
    resp = await rpc.handle(call("getBookById", {"id": 12345}))
    assert "error" not in resp
    assert tool_payload(resp) is None


@pytest.mark.asyncio
async def test_delete_missing_book_twice(rpc):
    for _ in range(2):
        resp = await rpc.handle(call("deleteBook", {"id": 77}))
        assert tool_payload(resp) == {"success": True, "message": "Book deleted successfully"}


# --- tools/call errors ---

@pytest.mark.asyncio
async def test_missing_tool_name(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {}})
    assert resp["error"] == {"code": -32602, "message": "Invalid params - tool name is required"}


@pytest.mark.asyncio
async def test_missing_params_object(rpc):
    resp = await rpc.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/call"})
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS


@pytest.mark.asyncio
async def test_non_numeric_id(rpc):
    resp = await rpc.handle(call("getBookById", {"id": "abc"}))
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS
    assert "abc" in resp["error"]["message"]


@pytest.mark.asyncio
async def test_missing_argument(rpc):
    resp = await rpc.handle(call("findBookByTitle"))
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS
    assert "title" in resp["error"]["message"]


@pytest.mark.asyncio
async def test_unknown_tool(rpc):
    resp = await rpc.handle(call("dropAllBooks", {}))
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS
    assert "dropAllBooks" in resp["error"]["message"]


@pytest.mark.asyncio
async def test_arguments_must_be_object(rpc):
    resp = await rpc.handle(call("getAllBooks", ["not", "a", "map"]))
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS


@pytest.mark.asyncio
async def test_store_failure_maps_to_internal_error():
    tools = AsyncMock(spec=BookTools)
    tools.find_book_by_author.side_effect = ConnectionError("store unreachable")
    rpc = JsonRpcRouter(ToolInvoker(tools))
    resp = await rpc.handle(call("findBookByAuthor", {"author": "Austen"}, request_id="x"))
    assert resp["id"] == "x"
    assert resp["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert resp["error"]["message"].startswith("Internal error:")
    assert "store unreachable" in resp["error"]["message"]


@pytest.mark.asyncio
async def test_out_of_range_id_is_invalid_params(rpc):
    resp = await rpc.handle(call("getBookById", {"id": "99999999999999999999"}))
    assert resp["error"]["code"] == ErrorCode.INVALID_PARAMS
    assert "99999999999999999999" in resp["error"]["message"]

"""
Tool invoker: resolves a tool name, extracts typed arguments, runs the store
call, and reports mutations to the change notifier.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from src.database import schemas
from src.mcp.errors import InternalToolError, InvalidParameter, MissingParameter, UnknownTool
from src.mcp.tools import NUMBER, ToolDefinition, get_tool
from src.services.book_tools import BookTools
from src.services.notifications import ChangeNotifier

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")

DELETE_RESULT = {"success": True, "message": "Book deleted successfully"}


# Ids are stored as signed 64-bit integers.
_MIN_ID = -(2 ** 63)
_MAX_ID = 2 ** 63 - 1


def _coerce_number(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidParameter(key, value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        try:
            number = int(value)
        except (OverflowError, ValueError):
            raise InvalidParameter(key, value)
    else:
        text = str(value)
        if not _INTEGER.fullmatch(text):
            raise InvalidParameter(key, value)
        number = int(text)
    if not _MIN_ID <= number <= _MAX_ID:
        raise InvalidParameter(key, value)
    return number


def _coerce_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    # JSON text keeps booleans and containers readable across clients
    return json.dumps(value)


def extract_arguments(tool: ToolDefinition, args: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Pull every declared parameter out of `args`, in declaration order.

    Raises MissingParameter for an absent or null required value and
    InvalidParameter for a number that cannot be read as an integer.
    Unknown extra keys are ignored.
    """
    extracted: Dict[str, Any] = {}
    for param in tool.parameters:
        value = args.get(param.name)
        if value is None:
            if param.name in tool.required:
                raise MissingParameter(param.name)
            continue
        if param.kind == NUMBER:
            extracted[param.name] = _coerce_number(param.name, value)
        else:
            extracted[param.name] = _coerce_string(value)
    return extracted


def to_jsonable(result: Any) -> Any:
    if isinstance(result, schemas.Book):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [to_jsonable(item) for item in result]
    return result


class ToolInvoker:
    def __init__(self, tools: BookTools, notifier: Optional[ChangeNotifier] = None):
        self._tools = tools
        self._notifier = notifier
        self._handlers: Dict[str, Callable[..., Awaitable[Any]]] = {
            "getAllBooks": self._get_all_books,
            "getBookById": self._get_book_by_id,
            "createBook": self._create_book,
            "updateBook": self._update_book,
            "deleteBook": self._delete_book,
            "findBookByTitle": self._find_book_by_title,
            "findBookByAuthor": self._find_book_by_author,
        }

    async def invoke(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Run tool `name` with `args` and return a JSON-ready result.

        Raises UnknownTool, MissingParameter or InvalidParameter for bad input
        and InternalToolError for anything that goes wrong in the store.
        """
        tool = get_tool(name)
        handler = self._handlers.get(name)
        if tool is None or handler is None:
            raise UnknownTool(name)

        kwargs = extract_arguments(tool, args or {})
        try:
            result = await handler(**kwargs)
        except Exception as e:
            logger.error("Tool %s failed: %s", name, e, exc_info=True)
            raise InternalToolError(name, e) from e
        return to_jsonable(result)

    # ---- notification bridge ----

    def _notify_saved(self, book: Optional[schemas.Book]) -> None:
        if self._notifier is not None and book is not None:
            self._notifier.book_saved(book)

    def _notify_deleted(self, book_id: int) -> None:
        if self._notifier is not None:
            self._notifier.book_deleted(book_id)

    # ---- handlers ----

    async def _get_all_books(self):
        return await self._tools.list_all_books()

    async def _get_book_by_id(self, id: int):
        return await self._tools.get_book_by_id(id)

    async def _create_book(self, title: str, author: str, isbn: str):
        book = await self._tools.create_book(title, author, isbn)
        self._notify_saved(book)
        return book

    async def _update_book(self, id: int, title: str, author: str, isbn: str):
        book = await self._tools.update_book(id, title, author, isbn)
        self._notify_saved(book)
        return book

    async def _delete_book(self, id: int):
        await self._tools.delete_book(id)
        self._notify_deleted(id)
        return dict(DELETE_RESULT)

    async def _find_book_by_title(self, title: str):
        return await self._tools.find_book_by_title(title)

    async def _find_book_by_author(self, author: str):
        return await self._tools.find_book_by_author(author)

"""
Static catalog of the book tools exposed over `tools/list` and `tools/call`.

Each tool declares its parameters once; the invoker uses the same descriptors
to extract and coerce arguments, so the advertised schema and the runtime
checks cannot drift apart.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple

STRING = "string"
NUMBER = "number"


@dataclass(frozen=True)
class ParamSpec:
    name: str
    kind: str
    description: str

    def to_schema(self) -> Dict[str, str]:
        return {"type": self.kind, "description": self.description}


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: Tuple[ParamSpec, ...] = ()
    required: FrozenSet[str] = field(default_factory=frozenset)

    def to_schema(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": {p.name: p.to_schema() for p in self.parameters},
                # keep declaration order in the wire form
                "required": [p.name for p in self.parameters if p.name in self.required],
            },
        }


_ID = ParamSpec("id", NUMBER, "Book ID")
_TITLE = ParamSpec("title", STRING, "Book title")
_AUTHOR = ParamSpec("author", STRING, "Book author")
_ISBN = ParamSpec("isbn", STRING, "Book ISBN")


def _tool(name: str, description: str, *params: ParamSpec) -> ToolDefinition:
    # Every parameter of every book tool is required.
    return ToolDefinition(name, description, tuple(params), frozenset(p.name for p in params))


TOOLS: Tuple[ToolDefinition, ...] = (
    _tool("getAllBooks", "Get all books"),
    _tool("getBookById", "Get book by ID", _ID),
    _tool("createBook", "Create a new book", _TITLE, _AUTHOR, _ISBN),
    _tool("updateBook", "Update an existing book", _ID, _TITLE, _AUTHOR, _ISBN),
    _tool("deleteBook", "Delete a book by ID", _ID),
    _tool("findBookByTitle", "Find books by title", ParamSpec("title", STRING, "Book title to search for")),
    _tool("findBookByAuthor", "Find books by author", ParamSpec("author", STRING, "Author name to search for")),
)

_BY_NAME: Dict[str, ToolDefinition] = {t.name: t for t in TOOLS}


def list_tools() -> Tuple[ToolDefinition, ...]:
    return TOOLS


def get_tool(name: str) -> ToolDefinition | None:
    return _BY_NAME.get(name)

from typing import Optional

from pydantic import BaseModel


# Schema for creating or replacing a book (request)
class BookCreate(BaseModel):
    title: str
    author: str
    isbn: str


# Schema for reading a book (response and broadcast payload).
# `id` stays empty for synthetic stream events such as the heartbeat.
class Book(BaseModel):
    id: Optional[int] = None
    title: str
    author: str = ""
    isbn: str = ""

    model_config = {
        "from_attributes": True,
    }


HEARTBEAT_TITLE = "ping"
TOMBSTONE_PREFIX = "deleted#"


def heartbeat() -> Book:
    return Book(title=HEARTBEAT_TITLE)


def tombstone(book_id: int) -> Book:
    return Book(title=f"{TOMBSTONE_PREFIX}{book_id}")

"""
Async facade over the blocking book repository.

Every repository call is submitted to a bounded thread pool so the event loop
keeps serving other requests while the store works. Results are converted to
`schemas.Book` before they leave the worker.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from src.database import models, schemas
from src.database.crud import BookRepository

logger = logging.getLogger(__name__)


def _to_schema(book: Optional[models.Book]) -> Optional[schemas.Book]:
    return schemas.Book.model_validate(book) if book is not None else None


def _to_schemas(books: List[models.Book]) -> List[schemas.Book]:
    return [schemas.Book.model_validate(b) for b in books]


class BookTools:
    def __init__(self, repo: BookRepository, max_workers: int = 10):
        self._repo = repo
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="book-store")

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    # ----------  READ  ----------

    async def list_all_books(self) -> List[schemas.Book]:
        return await self._run(lambda: _to_schemas(self._repo.find_all()))

    async def get_book_by_id(self, book_id: int) -> Optional[schemas.Book]:
        return await self._run(lambda: _to_schema(self._repo.find_by_id(book_id)))

    async def find_book_by_title(self, title: str) -> List[schemas.Book]:
        return await self._run(lambda: _to_schemas(self._repo.find_by_title(title)))

    async def find_book_by_author(self, author: str) -> List[schemas.Book]:
        return await self._run(lambda: _to_schemas(self._repo.find_by_author(author)))

    # ----------  WRITE  ----------

    async def create_book(self, title: str, author: str, isbn: str) -> schemas.Book:
        def _create():
            return _to_schema(self._repo.save(models.Book(title=title, author=author, isbn=isbn)))
        return await self._run(_create)

    async def update_book(self, book_id: int, title: str, author: str, isbn: str) -> Optional[schemas.Book]:
        """Replace the fields of an existing book. Returns None when the id is unknown."""
        def _update():
            db_book = self._repo.find_by_id(book_id)
            if db_book is None:
                return None
            db_book.title = title
            db_book.author = author
            db_book.isbn = isbn
            return _to_schema(self._repo.save(db_book))
        return await self._run(_update)

    async def delete_book(self, book_id: int) -> None:
        await self._run(self._repo.delete_by_id, book_id)
        logger.debug("Deleted book %s (if present)", book_id)

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from . import models


class BookRepository:
    """
    Synchronous record store over SQLAlchemy.

    Each call opens its own session, so the repository can be shared across
    worker threads without holding a connection between calls.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find_all(self) -> List[models.Book]:
        with self._session_factory() as db:
            return list(db.execute(select(models.Book).order_by(models.Book.id)).scalars().all())

    def find_by_id(self, book_id: int) -> Optional[models.Book]:
        with self._session_factory() as db:
            return db.get(models.Book, book_id)

    def find_by_title(self, title: str) -> List[models.Book]:
        return self._find_by(models.Book.title, title)

    def find_by_author(self, author: str) -> List[models.Book]:
        return self._find_by(models.Book.author, author)

    def save(self, book: models.Book) -> models.Book:
        """Insert or update `book`. The id is assigned on first save."""
        with self._session_factory() as db:
            merged = db.merge(book)
            db.commit()
            db.refresh(merged)
            return merged

    def delete_by_id(self, book_id: int) -> None:
        # Missing ids are a silent no-op.
        with self._session_factory() as db:
            db_book = db.get(models.Book, book_id)
            if db_book is not None:
                db.delete(db_book)
                db.commit()

    def _find_by(self, column, value: str) -> List[models.Book]:
        with self._session_factory() as db:
            query = select(models.Book).filter(column == value).order_by(models.Book.id)
            return list(db.execute(query).scalars().all())


def create_tables(engine) -> None:
    models.Base.metadata.create_all(bind=engine)

from __future__ import annotations

import logging

from src.database import schemas
from src.services.broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Publishes book mutations into the broadcaster.

    Best-effort: a failure here is logged and swallowed so the mutation that
    triggered it still succeeds.
    """

    def __init__(self, broadcaster: EventBroadcaster):
        self._broadcaster = broadcaster

    def book_saved(self, book: schemas.Book) -> None:
        self._publish(book)

    def book_deleted(self, book_id: int) -> None:
        self._publish(schemas.tombstone(book_id))

    def _publish(self, event: schemas.Book) -> None:
        try:
            self._broadcaster.publish(event)
        except Exception:
            logger.warning("Dropping change notification for %r", event.title, exc_info=True)

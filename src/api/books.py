from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import StreamingResponse

from src.api.deps import get_book_tools, get_broadcaster, get_notifier
from src.database import schemas
from src.services.book_tools import BookTools
from src.services.broadcaster import EventBroadcaster
from src.services.notifications import ChangeNotifier

router = APIRouter(
    prefix="/api/books",
    tags=["books"],
)


def sse_frame(event: schemas.Book) -> str:
    return f"data: {event.model_dump_json()}\n\n"


async def event_stream(broadcaster: EventBroadcaster, request: Optional[Request] = None) -> AsyncIterator[str]:
    """
    Render a broadcaster subscription as Server-Sent Events frames.

    The subscription is opened on the first iteration and released on the
    way out, so a response torn down before streaming never registers one.
    Runs until the subscription is closed or the client goes away.
    """
    subscription = broadcaster.subscribe()
    try:
        async for event in subscription:
            if request is not None and await request.is_disconnected():
                break
            yield sse_frame(event)
    finally:
        subscription.close()


@router.get("/stream")
async def stream_books(request: Request, broadcaster: EventBroadcaster = Depends(get_broadcaster)):
    """
    Server-Sent Events stream of book changes, merged with a periodic
    `ping` heartbeat so idle connections stay open behind proxies.
    """
    return StreamingResponse(
        event_stream(broadcaster, request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("", response_model=List[schemas.Book])
async def list_books_endpoint(tools: BookTools = Depends(get_book_tools)):
    return await tools.list_all_books()


@router.get("/{book_id}", response_model=Optional[schemas.Book])
async def read_book_endpoint(book_id: int, tools: BookTools = Depends(get_book_tools)):
    """
    Retrieve a single book. An unknown id yields a `null` body, not a 404.
    """
    return await tools.get_book_by_id(book_id)


@router.post("", response_model=schemas.Book, status_code=status.HTTP_201_CREATED)
async def create_book_endpoint(
    book: schemas.BookCreate,
    tools: BookTools = Depends(get_book_tools),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    created = await tools.create_book(book.title, book.author, book.isbn)
    notifier.book_saved(created)
    return created


@router.put("/{book_id}", response_model=Optional[schemas.Book])
async def update_book_endpoint(
    book_id: int,
    book: schemas.BookCreate,
    tools: BookTools = Depends(get_book_tools),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    updated = await tools.update_book(book_id, book.title, book.author, book.isbn)
    if updated is not None:
        notifier.book_saved(updated)
    return updated


@router.delete("/{book_id}")
async def delete_book_endpoint(
    book_id: int,
    tools: BookTools = Depends(get_book_tools),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    # Deleting an unknown id is not an error; the tombstone goes out regardless.
    try:
        await tools.delete_book(book_id)
    finally:
        notifier.book_deleted(book_id)
    return Response(status_code=status.HTTP_200_OK)

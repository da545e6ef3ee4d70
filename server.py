from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from src.config import settings
from src.database import database
from src.database.crud import BookRepository, create_tables
from src.services.book_tools import BookTools
from src.services.broadcaster import EventBroadcaster
from src.services.notifications import ChangeNotifier
from src.mcp.invoker import ToolInvoker
from src.mcp.router import JsonRpcRouter
from src.api import books as books_router
from src.api import mcp as mcp_router

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# --- App Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # On startup:
    # Initialize database tables
    create_tables(database.engine)

    # One broadcaster for the whole process; every stream subscriber hangs off it.
    broadcaster = EventBroadcaster(
        buffer_size=settings.subscriber_buffer_size,
        heartbeat_interval=settings.heartbeat_interval_sec,
    )
    notifier = ChangeNotifier(broadcaster)
    book_tools = BookTools(BookRepository(database.SessionLocal), max_workers=settings.worker_pool_size)

    app.state.broadcaster = broadcaster
    app.state.notifier = notifier
    app.state.book_tools = book_tools
    app.state.jsonrpc_router = JsonRpcRouter(ToolInvoker(book_tools, notifier))
    logger.info("Book tracker ready (db=%s)", database.DATABASE_URL)

    yield

    # On shutdown:
    # End open streams, then drain the store workers
    broadcaster.close()
    book_tools.shutdown()


# --- Main App Setup ---
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(books_router.router)
app.include_router(mcp_router.router)


# --- Health Check ---
@app.get("/api/health")
async def health(request: Request):
    return {
        "status": "ok",
        "streamSubscribers": request.app.state.broadcaster.subscriber_count,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

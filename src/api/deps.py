from fastapi import Request

from src.mcp.router import JsonRpcRouter
from src.services.book_tools import BookTools
from src.services.broadcaster import EventBroadcaster
from src.services.notifications import ChangeNotifier


# Shared resources are created in the app lifespan and parked on app.state.

def get_book_tools(request: Request) -> BookTools:
    return request.app.state.book_tools


def get_notifier(request: Request) -> ChangeNotifier:
    return request.app.state.notifier


def get_broadcaster(request: Request) -> EventBroadcaster:
    return request.app.state.broadcaster


def get_router(request: Request) -> JsonRpcRouter:
    return request.app.state.jsonrpc_router

"""
Request-scoped access to application state.

The card source, draft registry and room manager are created once per
application in main.create_app() and stored on app.state.
"""

from typing import TYPE_CHECKING

from fastapi.requests import HTTPConnection

from boosterdraft.services.card_source import CardSource
from boosterdraft.services.solo_draft import DraftRegistry

if TYPE_CHECKING:
    from boosterdraft.api.rooms import RoomManager


def get_card_source(connection: HTTPConnection) -> CardSource:
    return connection.app.state.card_source


def get_registry(connection: HTTPConnection) -> DraftRegistry:
    return connection.app.state.draft_registry


def get_room_manager(connection: HTTPConnection) -> "RoomManager":
    return connection.app.state.room_manager

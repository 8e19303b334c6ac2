"""
Multiplayer rooms over WebSocket.

The server is the host of every room: it runs the HostSession and each
socket is a guest peer. The first socket to connect owns the room and is
the only one allowed to send start_draft.

Clients exchange PeerMessage JSON objects:
    {"type": "join_request", "payload": {"name": "Alice"}}
"""

import asyncio
import logging
import random
import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from boosterdraft.api.dependencies import get_card_source, get_room_manager
from boosterdraft.config import settings as app_settings
from boosterdraft.models.booster import BoosterType
from boosterdraft.models.draft import DraftMode, DraftSettings
from boosterdraft.models.failure import FailureKind, KnownError
from boosterdraft.models.messages import MessageType, PeerMessage
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.host_session import HostSession
from boosterdraft.services.transport import HandlerRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rooms"])

SERVER_PEER_ID = "host"


class WebSocketRoomTransport(HandlerRegistry):
    """PeerTransport for the server host: one outbound queue per socket."""

    def __init__(self) -> None:
        super().__init__()
        self._outboxes: dict[str, asyncio.Queue[dict[str, Any]]] = {}

    @property
    def peer_id(self) -> str:
        return SERVER_PEER_ID

    def connect(self, peer_id: str) -> asyncio.Queue[dict[str, Any]]:
        outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._outboxes[peer_id] = outbox
        return outbox

    def disconnect(self, peer_id: str) -> None:
        self._outboxes.pop(peer_id, None)

    def peer_ids(self) -> list[str]:
        return list(self._outboxes)

    def send(self, target_id: str, message_type: MessageType, payload: dict[str, Any]) -> None:
        outbox = self._outboxes.get(target_id)
        if outbox is None:
            logger.debug("Dropped %s for disconnected peer %s", message_type.value, target_id)
            return
        outbox.put_nowait(PeerMessage(type=message_type, payload=payload).model_dump(mode="json"))

    def broadcast(self, message_type: MessageType, payload: dict[str, Any]) -> None:
        for peer_id in self.peer_ids():
            self.send(peer_id, message_type, payload)


class Room:
    """One room: its transport, host session and consumer task."""

    def __init__(self, room_id: str, source: CardSource) -> None:
        self.room_id = room_id
        self.source = source
        self.transport = WebSocketRoomTransport()
        self.host = HostSession(self.transport)
        self.owner_id: str | None = None
        self._consumer = asyncio.create_task(self.host.run())

    def connect(self, peer_id: str) -> asyncio.Queue[dict[str, Any]]:
        if self.owner_id is None:
            self.owner_id = peer_id
        return self.transport.connect(peer_id)

    def disconnect(self, peer_id: str) -> None:
        self.transport.disconnect(peer_id)
        if peer_id == self.owner_id:
            remaining = self.transport.peer_ids()
            self.owner_id = remaining[0] if remaining else None

    @property
    def is_empty(self) -> bool:
        return not self.transport.peer_ids()

    def dispatch(self, message: PeerMessage, peer_id: str) -> None:
        self.transport.dispatch(message, peer_id)

    async def start_draft(self, peer_id: str, payload: dict[str, Any]) -> None:
        """Open packs for everyone who joined and deal. Owner only."""
        if peer_id != self.owner_id:
            self.send_error(peer_id, "Only the room owner can start")
            return

        try:
            settings = DraftSettings(
                set_code=str(payload.get("set_code", "")).lower(),
                booster_type=str(payload.get("booster_type", BoosterType.PLAY.value)),
                number_of_packs=int(payload.get("number_of_packs", 3)),
                number_of_players=max(1, len(self.host.players)),
                draft_mode=DraftMode.MULTIPLAYER,
                set_name=str(payload.get("set_name", "")),
                set_release_date=payload.get("set_release_date"),
            )
            seed = payload.get("seed")
        except (TypeError, ValueError):
            self.send_error(peer_id, "Invalid draft settings")
            return
        except KnownError as e:
            self.send_error(peer_id, e.message, e.kind)
            return

        try:
            await self.host.open_and_start(
                self.source, settings, rng=random.Random(seed) if seed is not None else None
            )
        except KnownError as e:
            logger.warning("Room %s could not start: %s", self.room_id, e.message)
            self.send_error(peer_id, e.message, e.kind)

    def send_error(
        self, peer_id: str, message: str, kind: FailureKind = FailureKind.INVALID_INPUT
    ) -> None:
        self.transport.send(peer_id, MessageType.ERROR, {"message": message, "kind": kind.value})

    async def close(self) -> None:
        self.host.close()
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass


class RoomManager:
    """Rooms by ID. A room is dropped when its last socket leaves."""

    def __init__(self, max_players: int | None = None) -> None:
        self.max_players = max_players or app_settings.max_players
        self._rooms: dict[str, Room] = {}

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def get_or_create(self, room_id: str, source: CardSource) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id, source)
            self._rooms[room_id] = room
            logger.info("Opened room %s", room_id)
        return room

    async def leave(self, room_id: str, peer_id: str) -> None:
        room = self._rooms.get(room_id)
        if room is None:
            return
        room.disconnect(peer_id)
        if room.is_empty:
            del self._rooms[room_id]
            await room.close()
            logger.info("Closed room %s", room_id)

    async def close_all(self) -> None:
        rooms = list(self._rooms.values())
        self._rooms.clear()
        for room in rooms:
            await room.close()


async def _pump(websocket: WebSocket, outbox: asyncio.Queue[dict[str, Any]]) -> None:
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


@router.websocket("/rooms/{room_id}")
async def room_socket(
    websocket: WebSocket,
    room_id: str,
    manager: Annotated[RoomManager, Depends(get_room_manager)],
    source: Annotated[CardSource, Depends(get_card_source)],
) -> None:
    """Join a room as a peer. Send join_request first."""
    await websocket.accept()

    room = manager.get_or_create(room_id, source)
    if len(room.transport.peer_ids()) >= manager.max_players:
        await websocket.send_json(
            PeerMessage(
                type=MessageType.ERROR,
                payload={"message": "Room is full", "kind": FailureKind.INVALID_INPUT.value},
            ).model_dump(mode="json")
        )
        await websocket.close()
        return

    peer_id = uuid.uuid4().hex[:12]
    outbox = room.connect(peer_id)
    writer = asyncio.create_task(_pump(websocket, outbox))

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = PeerMessage.model_validate_json(text)
            except ValidationError:
                room.send_error(peer_id, "Malformed message")
                continue

            if message.type is MessageType.START_DRAFT:
                await room.start_draft(peer_id, message.payload)
            else:
                room.dispatch(message, peer_id)
    except WebSocketDisconnect:
        logger.info("Peer %s left room %s", peer_id, room_id)
    finally:
        writer.cancel()
        await manager.leave(room_id, peer_id)

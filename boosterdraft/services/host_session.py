"""
Multiplayer draft sessions.

The host owns the only DraftEngine of a room. Guests send join, pick and
state requests; the host answers with snapshots built from live engine
state. All incoming messages go through one asyncio.Queue with a single
consumer, so handlers never interleave.

INVARIANT: Joins are accepted only before the draft starts.

INVARIANT: Every seat gets exactly one draft_state per deal or pass; a
pick that does not finish the round only broadcasts who is still picking.
"""

import asyncio
import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from boosterdraft.models.card import Card
from boosterdraft.models.draft import DraftSettings, DraftSnapshot, Seat
from boosterdraft.models.failure import FailureKind, InvalidSettingsError
from boosterdraft.models.messages import (
    CardPayload,
    DraftStatePayload,
    MessageType,
    PeerMessage,
    PlayerInfo,
    PlayerPool,
    dump,
)
from boosterdraft.services.booster_generator import generate_draft_boosters
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.draft_engine import DraftEngine
from boosterdraft.services.transport import PeerTransport

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[DraftSnapshot], None]
LobbyListener = Callable[[list[PlayerInfo]], None]

HOST_MESSAGE_TYPES = (
    MessageType.JOIN_REQUEST,
    MessageType.MAKE_PICK,
    MessageType.REQUEST_STATE,
)


def _disposer(listeners: list, callback: Callable) -> Callable[[], None]:
    def dispose() -> None:
        if callback in listeners:
            listeners.remove(callback)

    return dispose


def seat_major_to_round_major(
    packs: Sequence[Sequence[Sequence[Card]]],
) -> list[list[list[Card]]]:
    """
    Reorder packs from [seat][round] to [round][seat].

    Seats with fewer rounds than the longest seat get empty packs.
    """
    if not packs:
        return []
    rounds = max(len(seat_packs) for seat_packs in packs)
    return [
        [list(seat_packs[r]) if r < len(seat_packs) else [] for seat_packs in packs]
        for r in range(rounds)
    ]


class HostSession:
    """
    Authoritative side of a multiplayer room.

    Usage:
        host = HostSession(transport)
        host.add_host_player("Alice")
        consumer = asyncio.create_task(host.run())
        ...
        host.start_draft(packs)  # packs[seat][round]
    """

    def __init__(self, transport: PeerTransport) -> None:
        self.transport = transport
        self.players: list[Seat] = []
        self.engine: DraftEngine | None = None
        self.total_packs = 0
        # Set while packs are being opened; joins are refused meanwhile
        self._starting = False
        self._queue: asyncio.Queue[tuple[PeerMessage, str]] = asyncio.Queue()
        self._listeners: list[SnapshotListener] = []
        self._lobby_listeners: list[LobbyListener] = []
        for message_type in HOST_MESSAGE_TYPES:
            transport.on(message_type, self._enqueue)

    @property
    def host_id(self) -> str:
        return self.transport.peer_id

    @property
    def is_drafting(self) -> bool:
        """True once packs are being opened or have been dealt."""
        return self._starting or self.engine is not None

    @property
    def is_complete(self) -> bool:
        return self.engine is not None and self.engine.is_complete

    def player(self, player_id: str) -> Seat | None:
        return next((seat for seat in self.players if seat.seat_id == player_id), None)

    def lobby(self) -> list[PlayerInfo]:
        return [PlayerInfo.from_seat(seat) for seat in self.players]

    # -------------------------------------------------------------------------
    # Host UI observers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: SnapshotListener) -> Callable[[], None]:
        """Receive the host seat's snapshot on every deal, pass and completion."""
        self._listeners.append(callback)
        return _disposer(self._listeners, callback)

    def subscribe_lobby(self, callback: LobbyListener) -> Callable[[], None]:
        """Receive the player list whenever someone joins."""
        self._lobby_listeners.append(callback)
        return _disposer(self._lobby_listeners, callback)

    # -------------------------------------------------------------------------
    # Message queue
    # -------------------------------------------------------------------------

    def _enqueue(self, message: PeerMessage, sender_id: str) -> None:
        self._queue.put_nowait((message, sender_id))

    async def run(self) -> None:
        """Consume incoming messages until cancelled."""
        while True:
            message, sender_id = await self._queue.get()
            try:
                self.handle(message, sender_id)
            finally:
                self._queue.task_done()

    async def process_pending(self) -> int:
        """
        Handle every message already queued.

        Returns:
            Number of messages handled
        """
        handled = 0
        while not self._queue.empty():
            message, sender_id = self._queue.get_nowait()
            try:
                self.handle(message, sender_id)
            finally:
                self._queue.task_done()
            handled += 1
        return handled

    def handle(self, message: PeerMessage, sender_id: str) -> None:
        if message.type is MessageType.JOIN_REQUEST:
            self._handle_join(sender_id, str(message.payload.get("name", "")))
        elif message.type is MessageType.MAKE_PICK:
            card_id = message.payload.get("card_id")
            if isinstance(card_id, str):
                self._handle_pick(sender_id, card_id, message.payload.get("foil"))
        elif message.type is MessageType.REQUEST_STATE:
            self._handle_request_state(sender_id)

    # -------------------------------------------------------------------------
    # Lobby
    # -------------------------------------------------------------------------

    def add_host_player(self, name: str) -> Seat:
        """Seat the host itself. Only valid before the draft starts."""
        if self.is_drafting:
            raise InvalidSettingsError("Draft already started.")
        existing = self.player(self.host_id)
        if existing is not None:
            return existing
        seat = Seat(seat_id=self.host_id, name=name)
        self.players.append(seat)
        self._lobby_changed()
        return seat

    def _handle_join(self, sender_id: str, name: str) -> None:
        if self.is_drafting:
            self._send_error(sender_id, "Draft already started", FailureKind.DRAFT_ALREADY_STARTED)
            return
        if self.player(sender_id) is not None:
            self._send_error(sender_id, "Already joined", FailureKind.INVALID_INPUT)
            return

        seat = Seat(seat_id=sender_id, name=name or f"Guest {len(self.players) + 1}")
        self.players.append(seat)
        logger.info("%s joined the room as %s", sender_id, seat.name)

        self.transport.send(
            sender_id,
            MessageType.ROOM_JOINED,
            {"player_id": sender_id, "players": [dump(p) for p in self.lobby()]},
        )
        self._lobby_changed()

    def _lobby_changed(self) -> None:
        lobby = self.lobby()
        self.transport.broadcast(MessageType.LOBBY_UPDATE, {"players": [dump(p) for p in lobby]})
        for listener in list(self._lobby_listeners):
            listener(lobby)

    def _send_error(self, target_id: str, message: str, kind: FailureKind) -> None:
        logger.debug("Sending error to %s: %s", target_id, message)
        self.transport.send(target_id, MessageType.ERROR, {"message": message, "kind": kind.value})

    # -------------------------------------------------------------------------
    # Draft
    # -------------------------------------------------------------------------

    def start_draft(self, packs: Sequence[Sequence[Sequence[Card]]]) -> None:
        """
        Deal the draft.

        Args:
            packs: Packs indexed [seat][round], seats in join order

        Raises:
            InvalidSettingsError: If the draft already started, nobody has
                joined, or the pack count does not match the seats
        """
        if self.is_drafting:
            raise InvalidSettingsError("Draft already started.")
        self._deal(packs)

    def _deal(self, packs: Sequence[Sequence[Sequence[Card]]]) -> None:
        if not self.players:
            raise InvalidSettingsError("No players have joined.")
        if len(packs) != len(self.players):
            raise InvalidSettingsError(
                f"Got packs for {len(packs)} seats but {len(self.players)} players joined."
            )

        engine = DraftEngine(self.players, seat_major_to_round_major(packs))
        self.engine = engine
        self.total_packs = engine.pack_count
        logger.info("Starting draft: %d players, %d packs", len(self.players), self.total_packs)

        self.transport.broadcast(
            MessageType.DRAFT_STARTED,
            {"total_packs": self.total_packs, "players": [dump(p) for p in self.lobby()]},
        )
        engine.start()
        self._on_transition(engine)

    async def open_and_start(
        self,
        source: CardSource,
        settings: DraftSettings,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """
        Open one set of packs per seated player and start the draft.

        The seat list is fixed before the packs are fetched: joins that
        arrive while the card source is awaited get "Draft already
        started".

        Raises:
            InvalidSettingsError: If the draft is starting or started, or
                nobody has joined
            EmptyCardPoolError: If the set has no cards
        """
        if self.is_drafting:
            raise InvalidSettingsError("Draft already started.")
        if not self.players:
            raise InvalidSettingsError("No players have joined.")

        seat_count = len(self.players)
        settings = replace(settings, number_of_players=seat_count)
        self._starting = True
        try:
            boosters = await generate_draft_boosters(source, settings, rng=rng)
        finally:
            self._starting = False

        per_seat = [
            [list(round_boosters[s].cards) for round_boosters in boosters]
            for s in range(seat_count)
        ]
        self._deal(per_seat)

    def pick(self, card_id: str, *, foil: bool | None = None) -> Card | None:
        """Pick for the host's own seat."""
        return self._handle_pick(self.host_id, card_id, foil)

    def _handle_pick(self, sender_id: str, card_id: str, foil: Any = None) -> Card | None:
        engine = self.engine
        if engine is None:
            return None

        transitioned = False

        def mark(_: DraftEngine) -> None:
            nonlocal transitioned
            transitioned = True

        unsubscribe = engine.subscribe(mark)
        try:
            card = engine.pick(sender_id, card_id, foil=foil if isinstance(foil, bool) else None)
        finally:
            unsubscribe()

        if card is None:
            return None

        if sender_id != self.host_id:
            self.transport.send(
                sender_id, MessageType.PICK_CONFIRMED, {"card": dump(CardPayload.from_card(card))}
            )
        if transitioned:
            self._on_transition(engine)
        else:
            self.transport.broadcast(
                MessageType.PLAYER_STATUS_UPDATE,
                {"waiting_for": engine.waiting_for(), "players": [dump(p) for p in self.lobby()]},
            )
        return card

    def _handle_request_state(self, sender_id: str) -> None:
        if self.engine is None:
            return
        snapshot = self.engine.snapshot(sender_id)
        if snapshot is None:
            logger.debug("Ignoring state request from unknown peer %s", sender_id)
            return
        self.transport.send(
            sender_id, MessageType.DRAFT_STATE, dump(DraftStatePayload.from_snapshot(snapshot))
        )

    def _on_transition(self, engine: DraftEngine) -> None:
        if engine.is_complete:
            self._finish(engine)
        self._broadcast_state(engine)

    def _broadcast_state(self, engine: DraftEngine) -> None:
        for seat in self.players:
            snapshot = engine.snapshot(seat.seat_id)
            if snapshot is None:
                continue
            if seat.seat_id == self.host_id:
                for listener in list(self._listeners):
                    listener(snapshot)
            else:
                self.transport.send(
                    seat.seat_id,
                    MessageType.DRAFT_STATE,
                    dump(DraftStatePayload.from_snapshot(snapshot)),
                )

    def _finish(self, engine: DraftEngine) -> None:
        pools = engine.final_pools()
        players = [
            PlayerPool(
                id=seat.seat_id,
                name=seat.name,
                picks=[CardPayload.from_card(card) for card in pools[seat.seat_id]],
            )
            for seat in self.players
        ]
        logger.info("Multiplayer draft complete")
        self.transport.broadcast(MessageType.DRAFT_COMPLETE, {"players": [dump(p) for p in players]})

    def final_pools(self) -> dict[str, list[Card]]:
        return self.engine.final_pools() if self.engine is not None else {}

    def close(self) -> None:
        for message_type in HOST_MESSAGE_TYPES:
            self.transport.off(message_type, self._enqueue)


class GuestSession:
    """
    Client side of a room. Keeps the latest state the host sent.

    Usage:
        guest = GuestSession(transport, host_id="host")
        guest.join("Bob")
        guest.make_pick(guest.state.hand[0].id)
    """

    def __init__(self, transport: PeerTransport, host_id: str) -> None:
        self.transport = transport
        self.host_id = host_id
        self.player_id: str | None = None
        self.players: list[PlayerInfo] = []
        self.state: DraftStatePayload | None = None
        self.waiting_for: list[str] = []
        self.picks: list[Card] = []
        self.final_pools: list[PlayerPool] = []
        self.total_packs = 0
        self.is_complete = False
        self.error: str | None = None
        self._listeners: list[Callable[["GuestSession"], None]] = []

        self._handlers = {
            MessageType.ROOM_JOINED: self._on_room_joined,
            MessageType.LOBBY_UPDATE: self._on_lobby_update,
            MessageType.DRAFT_STARTED: self._on_draft_started,
            MessageType.DRAFT_STATE: self._on_draft_state,
            MessageType.PICK_CONFIRMED: self._on_pick_confirmed,
            MessageType.PLAYER_STATUS_UPDATE: self._on_status_update,
            MessageType.DRAFT_COMPLETE: self._on_draft_complete,
            MessageType.ERROR: self._on_error,
        }
        for message_type, handler in self._handlers.items():
            transport.on(message_type, handler)

    @property
    def hand(self) -> list[Card]:
        if self.state is None:
            return []
        return [card.to_card() for card in self.state.hand]

    def subscribe(self, callback: Callable[["GuestSession"], None]) -> Callable[[], None]:
        self._listeners.append(callback)
        return _disposer(self._listeners, callback)

    def join(self, name: str) -> None:
        self.transport.send(self.host_id, MessageType.JOIN_REQUEST, {"name": name})

    def make_pick(self, card_id: str, *, foil: bool | None = None) -> None:
        payload: dict[str, Any] = {"card_id": card_id}
        if foil is not None:
            payload["foil"] = foil
        self.transport.send(self.host_id, MessageType.MAKE_PICK, payload)

    def request_state(self) -> None:
        self.transport.send(self.host_id, MessageType.REQUEST_STATE, {})

    def close(self) -> None:
        for message_type, handler in self._handlers.items():
            self.transport.off(message_type, handler)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _on_room_joined(self, message: PeerMessage, sender_id: str) -> None:
        self.player_id = message.payload.get("player_id")
        self.players = [PlayerInfo.model_validate(p) for p in message.payload.get("players", [])]
        self.error = None
        self._changed()

    def _on_lobby_update(self, message: PeerMessage, sender_id: str) -> None:
        self.players = [PlayerInfo.model_validate(p) for p in message.payload.get("players", [])]
        self._changed()

    def _on_draft_started(self, message: PeerMessage, sender_id: str) -> None:
        self.total_packs = int(message.payload.get("total_packs", 0))
        self.players = [PlayerInfo.model_validate(p) for p in message.payload.get("players", [])]
        self._changed()

    def _on_draft_state(self, message: PeerMessage, sender_id: str) -> None:
        self.state = DraftStatePayload.model_validate(message.payload)
        self.waiting_for = list(self.state.waiting_for)
        self.is_complete = self.state.is_complete
        self._changed()

    def _on_pick_confirmed(self, message: PeerMessage, sender_id: str) -> None:
        self.picks.append(CardPayload.model_validate(message.payload["card"]).to_card())
        self._changed()

    def _on_status_update(self, message: PeerMessage, sender_id: str) -> None:
        self.waiting_for = list(message.payload.get("waiting_for", []))
        self._changed()

    def _on_draft_complete(self, message: PeerMessage, sender_id: str) -> None:
        self.final_pools = [PlayerPool.model_validate(p) for p in message.payload.get("players", [])]
        self.is_complete = True
        self._changed()

    def _on_error(self, message: PeerMessage, sender_id: str) -> None:
        self.error = str(message.payload.get("message", ""))
        logger.warning("Host reported error: %s", self.error)
        self._changed()

"""
Peer message vocabulary and payload shapes.

Payloads travel as JSON-ready dicts (`model_dump(mode="json")`) so any
transport can carry them.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from boosterdraft.models.card import Card
from boosterdraft.models.draft import DraftSnapshot, Seat


class MessageType(str, Enum):
    """Every message a draft room sends or receives."""

    JOIN_REQUEST = "join_request"
    ROOM_JOINED = "room_joined"
    LOBBY_UPDATE = "lobby_update"
    DRAFT_STARTED = "draft_started"
    DRAFT_STATE = "draft_state"
    MAKE_PICK = "make_pick"
    PICK_CONFIRMED = "pick_confirmed"
    PLAYER_STATUS_UPDATE = "player_status_update"
    REQUEST_STATE = "request_state"
    DRAFT_COMPLETE = "draft_complete"
    ERROR = "error"

    # Sent by the room owner when the server is the host
    START_DRAFT = "start_draft"


class PeerMessage(BaseModel):
    """Envelope for one message on the wire."""

    type: MessageType
    payload: dict[str, Any] = Field(default_factory=dict)


class CardPayload(BaseModel):
    """Card fields a client needs to show, pick and export a card."""

    id: str
    name: str
    set_code: str = ""
    set_name: str = ""
    collector_number: str = ""
    rarity: str = "common"
    type_line: str = ""
    mana_cost: str = ""
    cmc: float = 0.0
    colors: list[str] = Field(default_factory=list)
    is_foil: bool = False
    is_from_list: bool = False

    @classmethod
    def from_card(cls, card: Card) -> "CardPayload":
        return cls(
            id=card.id,
            name=card.name,
            set_code=card.set_code,
            set_name=card.set_name,
            collector_number=card.collector_number,
            rarity=card.rarity,
            type_line=card.type_line,
            mana_cost=card.mana_cost,
            cmc=card.cmc,
            colors=list(card.effective_colors),
            is_foil=card.is_foil,
            is_from_list=card.is_from_list,
        )

    def to_card(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            set_code=self.set_code,
            set_name=self.set_name,
            collector_number=self.collector_number,
            rarity=self.rarity,
            type_line=self.type_line,
            mana_cost=self.mana_cost,
            cmc=self.cmc,
            colors=tuple(self.colors),
            is_foil=self.is_foil,
            is_from_list=self.is_from_list,
        )


class PlayerInfo(BaseModel):
    """Public view of a seat in the lobby."""

    id: str
    name: str
    has_picked: bool = False

    @classmethod
    def from_seat(cls, seat: Seat) -> "PlayerInfo":
        return cls(id=seat.seat_id, name=seat.name, has_picked=seat.has_picked)


class DraftStatePayload(BaseModel):
    """Per-seat state snapshot."""

    hand: list[CardPayload]
    pack_number: int
    pick_number: int
    waiting_for: list[str]
    is_complete: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: DraftSnapshot) -> "DraftStatePayload":
        return cls(
            hand=[CardPayload.from_card(card) for card in snapshot.hand],
            pack_number=snapshot.pack_number,
            pick_number=snapshot.pick_number,
            waiting_for=list(snapshot.waiting_for),
            is_complete=snapshot.is_complete,
        )


class PlayerPool(BaseModel):
    """A seat's final picks."""

    id: str
    name: str
    picks: list[CardPayload]


def dump(model: BaseModel) -> dict[str, Any]:
    """JSON-ready payload dict."""
    return model.model_dump(mode="json")

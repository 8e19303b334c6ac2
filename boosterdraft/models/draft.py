from dataclasses import dataclass, field
from enum import Enum

from boosterdraft.models.booster import BoosterType
from boosterdraft.models.card import Card
from boosterdraft.models.failure import InvalidSettingsError


class DraftMode(str, Enum):
    """How the opened packs are used."""

    DRAFT = "draft"
    SEALED = "sealed"
    MULTIPLAYER = "multiplayer"


class DraftPhase(str, Enum):
    """Rotation engine states."""

    DEALING = "dealing"
    AWAITING_PICKS = "awaiting_picks"
    ROTATING = "rotating"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class DraftSettings:
    """
    Settings fixed at draft start.

    Attributes:
        set_code: Scryfall set code to open
        booster_type: Product to open (unknown names use the fallback layout)
        number_of_packs: Pack rounds per seat (sealed: packs opened)
        number_of_players: Seats including bots
        pick_time_seconds: Per-pick time budget, 0 for unlimited
        draft_mode: draft, sealed or multiplayer
        set_name: Display name of the set
        set_release_date: ISO date used to narrow the bonus sheet
    """

    set_code: str
    booster_type: BoosterType | str = BoosterType.PLAY
    number_of_packs: int = 3
    number_of_players: int = 8
    pick_time_seconds: int = 0
    draft_mode: DraftMode = DraftMode.DRAFT
    set_name: str = ""
    set_release_date: str | None = None

    def __post_init__(self) -> None:
        if not self.set_code:
            raise InvalidSettingsError("A set code is required.")
        if self.number_of_packs < 1:
            raise InvalidSettingsError(
                f"number_of_packs must be at least 1, got {self.number_of_packs}"
            )
        if self.number_of_players < 1:
            raise InvalidSettingsError(
                f"number_of_players must be at least 1, got {self.number_of_players}"
            )
        if self.pick_time_seconds < 0:
            raise InvalidSettingsError(
                f"pick_time_seconds must not be negative, got {self.pick_time_seconds}"
            )


@dataclass
class Seat:
    """
    A drafter, human or bot.

    Attributes:
        seat_id: Stable identifier (peer ID for networked seats)
        name: Display name
        is_bot: Picks are made by the bot heuristic
        picks: Cards taken so far, in pick order
        hand: Pack currently in front of this seat
        has_picked: Already picked from the current hand
        color_preferences: Colors absorbed from earlier picks (bots)
    """

    seat_id: str
    name: str
    is_bot: bool = False
    picks: list[Card] = field(default_factory=list)
    hand: list[Card] = field(default_factory=list)
    has_picked: bool = False
    color_preferences: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DraftSnapshot:
    """
    What one seat sees of the draft.

    Attributes:
        hand: Cards available to pick
        pack_number: 1-based pack round
        pick_number: 1-based pick within the current pack
        waiting_for: Names of seats that have not picked this round
        is_complete: Draft has finished
    """

    hand: tuple[Card, ...]
    pack_number: int
    pick_number: int
    waiting_for: tuple[str, ...]
    is_complete: bool = False

from dataclasses import dataclass
from enum import Enum

from boosterdraft.models.card import Card


class BoosterType(str, Enum):
    """Booster products the generator can open."""

    # Play Booster, MKM (Feb 2024) onwards
    PLAY = "play"
    # Draft Booster, before MKM
    DRAFT = "draft"
    # Set Booster, ZNR through LCI
    SET = "set"


BOOSTER_SIZES: dict[BoosterType, int] = {
    BoosterType.PLAY: 14,
    BoosterType.DRAFT: 15,
    BoosterType.SET: 12,
}


def parse_booster_type(value: BoosterType | str) -> BoosterType | str:
    """
    Resolve a product name to a BoosterType.

    Unknown product names are returned unchanged so the generator can
    route them to the fallback layout.
    """
    try:
        return BoosterType(value)
    except ValueError:
        return value


@dataclass(frozen=True, slots=True)
class Booster:
    """
    An opened pack.

    Attributes:
        cards: Cards in slot order
        set_code: Set the pack was opened from
        booster_type: Product the pack was opened as
    """

    cards: tuple[Card, ...]
    set_code: str
    booster_type: BoosterType | str

    def __len__(self) -> int:
        return len(self.cards)

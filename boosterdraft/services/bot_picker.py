"""
Bot picker - rarity-first, color-locking pick heuristic.

A bot takes the highest-rarity card in its hand. Once it has picked a
colored card it sticks to those colors: the highest-rarity on-color card
beats any off-color card.
"""

from collections.abc import Sequence

from boosterdraft.models.card import Card
from boosterdraft.models.draft import Seat

# Lower ranks are picked first. Special behaves as rare, bonus as uncommon.
RARITY_RANK: dict[str, int] = {
    "mythic": 0,
    "rare": 1,
    "special": 1,
    "uncommon": 2,
    "bonus": 2,
    "common": 3,
}
UNRANKED = 4

BOT_NAMES = (
    "Jace Bot",
    "Liliana Bot",
    "Chandra Bot",
    "Nissa Bot",
    "Gideon Bot",
    "Ajani Bot",
    "Teferi Bot",
    "Karn Bot",
)


def bot_name(index: int) -> str:
    """Display name for the index-th bot (0-based)."""
    if index < len(BOT_NAMES):
        return BOT_NAMES[index]
    return f"Bot {index + 1}"


def rank_by_rarity(hand: Sequence[Card]) -> list[Card]:
    """Hand sorted mythic first; ties keep hand order."""
    return sorted(hand, key=lambda card: RARITY_RANK.get(card.rarity, UNRANKED))


def choose_pick(hand: Sequence[Card], color_preferences: Sequence[str]) -> Card | None:
    """
    Choose a card for a bot.

    Args:
        hand: Cards available
        color_preferences: Colors the bot has committed to

    Returns:
        The best on-color card if any, else the best card, else None for
        an empty hand
    """
    ranked = rank_by_rarity(hand)
    if not ranked:
        return None

    if color_preferences:
        preferred = set(color_preferences)
        for card in ranked:
            if preferred.intersection(card.effective_colors):
                return card

    return ranked[0]


def absorb_colors(color_preferences: list[str], card: Card) -> None:
    """Add the card's colors to the preferences, keeping first-seen order."""
    for color in card.effective_colors:
        if color not in color_preferences:
            color_preferences.append(color)


class DraftBot:
    """
    Picks for one bot seat.

    The seat's color_preferences are the bot's memory across picks.
    """

    def __init__(self, seat: Seat) -> None:
        self.seat = seat

    def choose(self) -> Card | None:
        return choose_pick(self.seat.hand, self.seat.color_preferences)

    def remember(self, card: Card) -> None:
        absorb_colors(self.seat.color_preferences, card)

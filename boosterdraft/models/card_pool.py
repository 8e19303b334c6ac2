"""
Card Pool - rarity-stratified view of a set's printings.

INVARIANT: Every eligible card lands in exactly one of
commons, uncommons, rares, mythics, basic_lands or variants.

INVARIANT: foil_only is a tag, not a partition. A foil-only card also
appears in its rarity bucket (or in variants) when it is eligible.

All buckets exist from construction, possibly empty.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from boosterdraft.models.card import Card

# Layouts that never belong in a pack
EXCLUDED_LAYOUTS = frozenset({"token", "art_series"})

# Promotional print runs sold outside boosters
PROMO_ONLY_TYPES = frozenset({"buyabox", "bundle", "prerelease", "judge_gift"})

# Frames that mark a "booster fun" variant printing
VARIANT_FRAMES = frozenset({"showcase", "extendedart"})


@dataclass(frozen=True, slots=True)
class CardPool:
    """
    Immutable partition of a set's card list.

    Usage:
        pool = build_card_pool(cards)
        commons = pool.bucket("common")
    """

    commons: tuple[Card, ...] = ()
    uncommons: tuple[Card, ...] = ()
    rares: tuple[Card, ...] = ()
    mythics: tuple[Card, ...] = ()
    basic_lands: tuple[Card, ...] = ()
    variants: tuple[Card, ...] = ()
    foil_only: tuple[Card, ...] = ()
    all: tuple[Card, ...] = ()

    def bucket(self, rarity: str) -> tuple[Card, ...]:
        """
        Get the bucket for a rarity name.

        Args:
            rarity: common, uncommon, rare, mythic or land

        Raises:
            ValueError: If rarity is not a bucket name
        """
        buckets = {
            "common": self.commons,
            "uncommon": self.uncommons,
            "rare": self.rares,
            "mythic": self.mythics,
            "land": self.basic_lands,
        }
        if rarity not in buckets:
            raise ValueError(f"Unknown pool bucket: {rarity}")
        return buckets[rarity]

    def variants_of(self, rarity: str) -> tuple[Card, ...]:
        """Variant printings with the given rarity."""
        return tuple(card for card in self.variants if card.rarity == rarity)

    def foil_eligible(self) -> tuple[Card, ...]:
        """Every card in the unfiltered list that can be printed foil."""
        return tuple(card for card in self.all if card.can_be_foil)

    def is_empty(self) -> bool:
        return not self.all


def _is_variant(card: Card) -> bool:
    """Non-booster printing with a special frame or border."""
    if card.booster:
        return False
    return (
        bool(card.frame_effects)
        or card.border_color == "borderless"
        or "boosterfun" in card.promo_types
        or card.frame in VARIANT_FRAMES
    )


def build_card_pool(cards: Iterable[Card]) -> CardPool:
    """
    Classify a set's printings into pack buckets.

    Rules are applied in order and the first match wins:
    1. Tokens and art cards are dropped
    2. Basic lands go to basic_lands
    3. Pure promos (buy-a-box, bundle, prerelease, judge gift) are dropped
    4. Non-booster printings with special frames go to variants
    5. Other non-booster printings are dropped
    6. The rest is split by rarity; unknown rarities are dropped

    A second pass tags foil-only printings.

    Args:
        cards: Every printing fetched for the set

    Returns:
        CardPool with all buckets populated
    """
    all_cards = tuple(cards)
    buckets: dict[str, list[Card]] = {
        "common": [],
        "uncommon": [],
        "rare": [],
        "mythic": [],
    }
    basic_lands: list[Card] = []
    variants: list[Card] = []

    for card in all_cards:
        if card.layout in EXCLUDED_LAYOUTS:
            continue

        if "Basic Land" in card.type_line:
            basic_lands.append(card)
            continue

        if PROMO_ONLY_TYPES.intersection(card.promo_types):
            continue

        if _is_variant(card):
            variants.append(card)
            continue

        if not card.booster:
            continue

        if card.rarity in buckets:
            buckets[card.rarity].append(card)

    foil_only = tuple(card for card in all_cards if card.is_foil_only)

    return CardPool(
        commons=tuple(buckets["common"]),
        uncommons=tuple(buckets["uncommon"]),
        rares=tuple(buckets["rare"]),
        mythics=tuple(buckets["mythic"]),
        basic_lands=tuple(basic_lands),
        variants=tuple(variants),
        foil_only=foil_only,
        all=all_cards,
    )

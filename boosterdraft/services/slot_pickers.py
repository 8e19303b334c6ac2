"""
Slot pickers - random selection primitives for booster slots.

Every picker takes the pool and an injected `random.Random`, so a seeded
generator reproduces the same packs. Pickers never fail on sparse pools:
they degrade to neighbouring rarities, then to the whole set.
"""

import random
from collections.abc import Sequence
from typing import TypeVar

from boosterdraft.config import (
    FOIL_ONLY_CHANCE,
    MYTHIC_CHANCE_DRAFT,
    VARIANT_SUBSTITUTION_CHANCE,
    WILDCARD_COMMON_THRESHOLD,
    WILDCARD_RARE_THRESHOLD,
    WILDCARD_UNCOMMON_THRESHOLD,
)
from boosterdraft.models.card import Card
from boosterdraft.models.card_pool import CardPool

T = TypeVar("T")

# Buckets consulted, in order, when the requested bucket runs short
FALLBACK_CHAIN: dict[str, tuple[str, ...]] = {
    "common": ("uncommon", "rare"),
    "uncommon": ("common", "rare"),
    "rare": ("mythic", "uncommon", "common"),
    "mythic": ("rare", "uncommon", "common"),
    "land": ("common",),
}


def pick_random(items: Sequence[T], rng: random.Random) -> T:
    """
    Pick one element uniformly.

    Raises:
        IndexError: If items is empty
    """
    return items[rng.randrange(len(items))]


def pick_random_n(items: Sequence[T], n: int, rng: random.Random) -> list[T]:
    """
    Pick n elements, unique while the source allows it.

    When fewer elements exist than are still needed, every element is
    taken (shuffled) and sampling starts over, so repeats only appear once
    the source is exhausted.

    Args:
        items: Source elements
        n: Number of elements wanted
        rng: Random source

    Returns:
        Exactly n elements, or an empty list if items is empty or n <= 0
    """
    if n <= 0 or not items:
        return []

    result: list[T] = []
    while len(result) < n:
        remaining = n - len(result)
        if len(items) >= remaining:
            result.extend(rng.sample(list(items), remaining))
        else:
            result.extend(rng.sample(list(items), len(items)))

    return result


def safe_pick(pool: CardPool, count: int, rarity: str, rng: random.Random) -> list[Card]:
    """
    Pick cards of a rarity, filling any shortfall from neighbouring buckets.

    Args:
        pool: Card pool for the set
        count: Number of cards wanted
        rarity: common, uncommon, rare, mythic or land
        rng: Random source

    Returns:
        count cards, unless the whole set is empty
    """
    source = pool.bucket(rarity)

    if len(source) >= count:
        return pick_random_n(source, count, rng)

    picked = pick_random_n(source, len(source), rng)
    remaining = count - len(picked)

    if remaining > 0:
        fallback: list[Card] = []
        for name in FALLBACK_CHAIN[rarity]:
            fallback.extend(pool.bucket(name))

        if not fallback:
            fallback = list(pool.all)

        picked.extend(pick_random_n(fallback, remaining, rng))

    return picked


def pick_rare_or_mythic(
    pool: CardPool,
    rng: random.Random,
    mythic_chance: float = MYTHIC_CHANCE_DRAFT,
) -> Card:
    """
    Pick the rare slot.

    Args:
        pool: Card pool for the set
        rng: Random source
        mythic_chance: Probability of upgrading to a mythic

    Returns:
        A rare or mythic; an uncommon-first fallback if the set has neither
    """
    if not pool.mythics:
        if not pool.rares:
            return safe_pick(pool, 1, "uncommon", rng)[0]
        return pick_random(pool.rares, rng)

    if not pool.rares:
        return pick_random(pool.mythics, rng)

    if rng.random() < mythic_chance:
        return pick_random(pool.mythics, rng)
    return pick_random(pool.rares, rng)


def _with_variants(
    pool: CardPool,
    standard: Sequence[Card],
    rarity: str,
    rng: random.Random,
) -> Sequence[Card]:
    """Standard cards of a rarity, swapped for variants some of the time."""
    variants = pool.variants_of(rarity)
    if not standard:
        return variants
    if not variants:
        return standard
    if rng.random() < VARIANT_SUBSTITUTION_CHANCE:
        return variants
    return standard


def pick_wildcard(pool: CardPool, rng: random.Random) -> Card:
    """
    Pick a wildcard slot with weighted rarity.

    Odds: common 49%, uncommon 35%, rare 12.5%, mythic 3.5%. A rolled
    rarity with no cards falls through to the next one up.

    Raises:
        IndexError: If the pool has no cards at all
    """
    roll = rng.random()

    tiers = (
        (WILDCARD_COMMON_THRESHOLD, pool.commons, "common"),
        (WILDCARD_UNCOMMON_THRESHOLD, pool.uncommons, "uncommon"),
        (WILDCARD_RARE_THRESHOLD, pool.rares, "rare"),
    )
    for threshold, standard, rarity in tiers:
        if roll < threshold:
            source = _with_variants(pool, standard, rarity, rng)
            if source:
                return pick_random(source, rng)

    source = _with_variants(pool, pool.mythics, "mythic", rng)
    if source:
        return pick_random(source, rng)

    return pick_random(pool.all, rng)


def pick_foil_card(pool: CardPool, rng: random.Random) -> Card | None:
    """
    Pick the foil slot.

    Foil-only printings show up 15% of the time; otherwise any card that
    can be foil is used.

    Returns:
        A foil copy of the picked card, or None if nothing in the set can
        be foil (the caller substitutes a wildcard)
    """
    if pool.foil_only and rng.random() < FOIL_ONLY_CHANCE:
        return pick_random(pool.foil_only, rng).as_foil()

    foilable = pool.foil_eligible()
    if foilable:
        return pick_random(foilable, rng).as_foil()

    return None

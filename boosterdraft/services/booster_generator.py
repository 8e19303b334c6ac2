"""
Booster generator.

Opens packs for the three booster products from a set's card pool:

    play   (14)  6 C, C-or-List, 3 U, R/M (1:7), land, wildcard, foil
    draft  (15)  10 C, 3 U, R/M (1:8), land
    set    (12)  6 C/U, 2 U, R/M, R/M-or-foil, land, art-card placeholder

Unknown products, and any product whose layout fails on an odd pool,
use a simplified fallback layout. The only fatal condition is a set
with no cards at all.
"""

import logging
import random
from collections.abc import Callable, Sequence
from datetime import date

from boosterdraft.config import (
    LIST_SLOT_CHANCE,
    MYTHIC_CHANCE_DRAFT,
    MYTHIC_CHANCE_PLAY,
    SET_BOOSTER_FOIL_SLOT_CHANCE,
)
from boosterdraft.models.booster import Booster, BoosterType, parse_booster_type
from boosterdraft.models.card import Card
from boosterdraft.models.card_pool import CardPool, build_card_pool
from boosterdraft.models.draft import DraftSettings
from boosterdraft.models.failure import CardSourceError, EmptyCardPoolError
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.slot_pickers import (
    pick_foil_card,
    pick_random,
    pick_random_n,
    pick_rare_or_mythic,
    pick_wildcard,
    safe_pick,
)

logger = logging.getLogger(__name__)

# Release dates that switch the products a set was printed in
PLAY_BOOSTER_START = date(2024, 2, 9)  # MKM
SET_BOOSTER_START = date(2020, 9, 25)  # ZNR

# Fallback layouts never exceed this many cards
MAX_FALLBACK_SIZE = 14


class BoosterGenerator:
    """
    Opens packs from one set's pool.

    Usage:
        generator = BoosterGenerator(build_card_pool(cards), random.Random(7))
        cards = generator.generate(BoosterType.PLAY)
    """

    def __init__(
        self,
        pool: CardPool,
        rng: random.Random | None = None,
        bonus_sheet: Sequence[Card] = (),
    ) -> None:
        self.pool = pool
        self.rng = rng or random.Random()
        self.bonus_sheet = tuple(bonus_sheet)

    def _land_slot(self) -> Card:
        if self.pool.basic_lands:
            return pick_random(self.pool.basic_lands, self.rng)
        # Masters-style sets have no basics
        return safe_pick(self.pool, 1, "common", self.rng)[0]

    def _foil_slot(self) -> Card:
        foil = pick_foil_card(self.pool, self.rng)
        if foil is None:
            return pick_wildcard(self.pool, self.rng)
        return foil

    def _list_slot(self) -> Card:
        if self.rng.random() < LIST_SLOT_CHANCE and self.bonus_sheet:
            return pick_random(self.bonus_sheet, self.rng).as_list_card()
        return safe_pick(self.pool, 1, "common", self.rng)[0]

    def play_booster(self) -> list[Card]:
        """Play Booster, 14 cards."""
        cards: list[Card] = []
        cards.extend(safe_pick(self.pool, 6, "common", self.rng))
        cards.append(self._list_slot())
        cards.extend(safe_pick(self.pool, 3, "uncommon", self.rng))
        cards.append(pick_rare_or_mythic(self.pool, self.rng, MYTHIC_CHANCE_PLAY))
        cards.append(self._land_slot())
        cards.append(pick_wildcard(self.pool, self.rng))
        cards.append(self._foil_slot())
        return cards

    def draft_booster(self) -> list[Card]:
        """Draft Booster, 15 cards."""
        cards: list[Card] = []
        cards.extend(safe_pick(self.pool, 10, "common", self.rng))
        cards.extend(safe_pick(self.pool, 3, "uncommon", self.rng))
        cards.append(pick_rare_or_mythic(self.pool, self.rng, MYTHIC_CHANCE_DRAFT))
        cards.append(self._land_slot())
        return cards

    def set_booster(self) -> list[Card]:
        """Set Booster, 12 cards."""
        cards: list[Card] = []

        mixed = list(self.pool.commons) + list(self.pool.uncommons)
        if not mixed:
            mixed = list(self.pool.rares) or list(self.pool.all)
        cards.extend(pick_random_n(mixed, 6, self.rng))

        cards.extend(safe_pick(self.pool, 2, "uncommon", self.rng))
        cards.append(pick_rare_or_mythic(self.pool, self.rng))

        if self.rng.random() < SET_BOOSTER_FOIL_SLOT_CHANCE:
            cards.append(pick_rare_or_mythic(self.pool, self.rng))
        else:
            cards.append(self._foil_slot())

        cards.append(self._land_slot())

        # Art card slot, filled with a common
        cards.extend(safe_pick(self.pool, 1, "common", self.rng))
        return cards

    def fallback_booster(self) -> list[Card]:
        """Loose play-booster shape for products with no known layout."""
        cards: list[Card] = []
        cards.extend(safe_pick(self.pool, 9, "common", self.rng))
        cards.extend(safe_pick(self.pool, 3, "uncommon", self.rng))
        cards.append(pick_rare_or_mythic(self.pool, self.rng))
        cards.append(pick_wildcard(self.pool, self.rng))
        return cards[:MAX_FALLBACK_SIZE]

    def generate(self, booster_type: BoosterType | str) -> list[Card]:
        """
        Open one pack of the given product.

        A layout that raises is logged and replaced by the fallback layout.
        """
        layouts: dict[BoosterType, Callable[[], list[Card]]] = {
            BoosterType.PLAY: self.play_booster,
            BoosterType.DRAFT: self.draft_booster,
            BoosterType.SET: self.set_booster,
        }
        layout = layouts.get(parse_booster_type(booster_type))
        if layout is None:
            logger.info("Unknown booster type %r, using fallback layout", booster_type)
            return self.fallback_booster()

        try:
            return layout()
        except Exception:
            logger.warning(
                "%s booster generation failed, falling back to generic layout",
                booster_type,
                exc_info=True,
            )
            return self.fallback_booster()


def generate_booster(
    set_code: str,
    booster_type: BoosterType | str,
    cards: Sequence[Card],
    *,
    rng: random.Random | None = None,
    bonus_sheet: Sequence[Card] = (),
    pool: CardPool | None = None,
) -> Booster:
    """
    Open one booster from a set's printings.

    Args:
        set_code: Set being opened
        booster_type: Product to open
        cards: Every printing fetched for the set
        rng: Random source (seed it for reproducible packs)
        bonus_sheet: Cards for the play-booster List slot
        pool: Pre-built pool for cards, to avoid rebuilding per pack

    Raises:
        EmptyCardPoolError: If cards is empty
    """
    if not cards:
        raise EmptyCardPoolError(set_code)

    generator = BoosterGenerator(pool or build_card_pool(cards), rng, bonus_sheet)
    return Booster(
        cards=tuple(generator.generate(booster_type)),
        set_code=set_code,
        booster_type=parse_booster_type(booster_type),
    )


async def _load_bonus_sheet(source: CardSource, settings: DraftSettings) -> list[Card]:
    """Bonus sheet for play boosters; other products and fetch failures get none."""
    if parse_booster_type(settings.booster_type) is not BoosterType.PLAY:
        return []
    try:
        return await source.fetch_bonus_sheet(settings.set_release_date)
    except CardSourceError:
        logger.warning("Bonus sheet unavailable, List slot will use commons", exc_info=True)
        return []


async def _load_set(source: CardSource, set_code: str) -> list[Card]:
    cards = await source.fetch_set_cards(set_code)
    if not cards:
        raise EmptyCardPoolError(set_code)
    return cards


async def generate_draft_boosters(
    source: CardSource,
    settings: DraftSettings,
    *,
    rng: random.Random | None = None,
) -> list[list[Booster]]:
    """
    Open every pack for a draft.

    The set is fetched and pooled once for the whole draft.

    Returns:
        Boosters indexed [pack round][seat]

    Raises:
        EmptyCardPoolError: If the set has no cards
    """
    rng = rng or random.Random()
    cards = await _load_set(source, settings.set_code)
    bonus_sheet = await _load_bonus_sheet(source, settings)
    pool = build_card_pool(cards)

    rounds = [
        [
            generate_booster(
                settings.set_code,
                settings.booster_type,
                cards,
                rng=rng,
                bonus_sheet=bonus_sheet,
                pool=pool,
            )
            for _seat in range(settings.number_of_players)
        ]
        for _round in range(settings.number_of_packs)
    ]
    logger.info(
        "Opened %d x %d %s boosters for %s",
        settings.number_of_packs,
        settings.number_of_players,
        settings.booster_type,
        settings.set_code,
    )
    return rounds


async def open_sealed_pool(
    source: CardSource,
    settings: DraftSettings,
    *,
    rng: random.Random | None = None,
) -> list[Booster]:
    """
    Open number_of_packs boosters for a single sealed player.

    Raises:
        EmptyCardPoolError: If the set has no cards
    """
    rng = rng or random.Random()
    cards = await _load_set(source, settings.set_code)
    bonus_sheet = await _load_bonus_sheet(source, settings)
    pool = build_card_pool(cards)

    return [
        generate_booster(
            settings.set_code,
            settings.booster_type,
            cards,
            rng=rng,
            bonus_sheet=bonus_sheet,
            pool=pool,
        )
        for _ in range(settings.number_of_packs)
    ]


def available_booster_types(release_date: str | date) -> list[BoosterType]:
    """
    Products a set was printed in, by release date.

    Play Boosters from MKM, Draft and Set Boosters from ZNR until then,
    Draft Boosters only before ZNR.
    """
    released = date.fromisoformat(release_date) if isinstance(release_date, str) else release_date

    if released >= PLAY_BOOSTER_START:
        return [BoosterType.PLAY]
    if released >= SET_BOOSTER_START:
        return [BoosterType.DRAFT, BoosterType.SET]
    return [BoosterType.DRAFT]

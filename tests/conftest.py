import random

import pytest

from boosterdraft.models.card import Card
from boosterdraft.parsers.scryfall import SetData
from boosterdraft.services.card_source import StaticCardSource

BASIC_NAMES = ("Plains", "Island", "Swamp", "Mountain", "Forest")
COLORS = ("W", "U", "B", "R", "G")


def make_card(
    card_id: str,
    rarity: str = "common",
    *,
    name: str | None = None,
    colors: tuple[str, ...] = (),
    set_code: str = "tst",
    **kwargs,
) -> Card:
    """Card with sensible defaults for tests."""
    return Card(
        id=card_id,
        name=name or f"Card {card_id}",
        set_code=set_code,
        collector_number=card_id.rsplit("-", 1)[-1],
        rarity=rarity,
        colors=colors,
        **kwargs,
    )


def make_set(
    set_code: str = "tst",
    *,
    commons: int = 40,
    uncommons: int = 20,
    rares: int = 10,
    mythics: int = 4,
    variants: int = 3,
    foil_only: int = 2,
) -> list[Card]:
    """
    A synthetic set shaped like a real expansion.

    Every regular printing exists in foil and non-foil; variants are
    showcase rares outside boosters; foil-only printings are commons.
    """
    foilable = frozenset({"nonfoil", "foil"})
    cards: list[Card] = []
    for rarity, count in (
        ("common", commons),
        ("uncommon", uncommons),
        ("rare", rares),
        ("mythic", mythics),
    ):
        cards.extend(
            make_card(
                f"{set_code}-{rarity[0]}{i}",
                rarity,
                colors=(COLORS[i % len(COLORS)],),
                set_code=set_code,
                finishes=foilable,
            )
            for i in range(count)
        )
    cards.extend(
        make_card(
            f"{set_code}-l{i}",
            name=land,
            set_code=set_code,
            type_line=f"Basic Land — {land}",
        )
        for i, land in enumerate(BASIC_NAMES)
    )
    cards.extend(
        make_card(
            f"{set_code}-v{i}",
            "rare",
            set_code=set_code,
            booster=False,
            frame_effects=("showcase",),
            finishes=foilable,
        )
        for i in range(variants)
    )
    cards.extend(
        make_card(
            f"{set_code}-f{i}",
            set_code=set_code,
            finishes=frozenset({"foil"}),
        )
        for i in range(foil_only)
    )
    return cards


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def set_cards() -> list[Card]:
    return make_set()


@pytest.fixture
def bonus_sheet() -> list[Card]:
    """List cards released a month apart, starting in 2020."""
    return [
        make_card(
            f"plst-{i}",
            "rare",
            set_code="plst",
            released_at=f"{2020 + i // 12}-{i % 12 + 1:02d}-15",
        )
        for i in range(72)
    ]


@pytest.fixture
def set_list() -> list[SetData]:
    return [
        SetData(
            code="tst", name="Test Set", released_at="2024-04-19", set_type="expansion", card_count=84
        ),
        SetData(
            code="old", name="Old Set", released_at="2019-01-25", set_type="expansion", card_count=250
        ),
        SetData(
            code="znr", name="Zendikar Rising", released_at="2020-09-25", set_type="expansion",
            card_count=280,
        ),
        SetData(
            code="ptk", name="Token Set", released_at="2024-04-19", set_type="token", card_count=10
        ),
    ]


@pytest.fixture
def card_source(set_cards, bonus_sheet, set_list) -> StaticCardSource:
    return StaticCardSource(
        sets={"tst": set_cards},
        bonus_sheet=bonus_sheet,
        set_list=set_list,
    )

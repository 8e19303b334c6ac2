"""
Booster API endpoints.

Lists draftable sets and opens single boosters and sealed pools.
"""

import random
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boosterdraft.api.dependencies import get_card_source
from boosterdraft.models.booster import Booster, BoosterType
from boosterdraft.models.draft import DraftMode, DraftSettings
from boosterdraft.models.messages import CardPayload
from boosterdraft.services.booster_generator import (
    available_booster_types,
    generate_draft_boosters,
    open_sealed_pool,
)
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.deck_export import format_arena_export, format_scryfall_export

router = APIRouter(tags=["boosters"])

SEALED_DEFAULT_PACKS = 6


class SetResponse(BaseModel):
    """A set that can be opened."""

    code: str
    name: str
    released_at: str | None
    card_count: int
    booster_types: list[BoosterType]


class SetListResponse(BaseModel):
    sets: list[SetResponse]
    count: int


class BoosterRequest(BaseModel):
    """Request to open one booster."""

    set_code: str = Field(..., min_length=1)
    booster_type: str = BoosterType.PLAY.value
    set_release_date: str | None = None
    seed: int | None = None


class BoosterResponse(BaseModel):
    set_code: str
    booster_type: str
    cards: list[CardPayload]
    count: int

    @classmethod
    def from_booster(cls, booster: Booster) -> "BoosterResponse":
        booster_type = booster.booster_type
        return cls(
            set_code=booster.set_code,
            booster_type=booster_type.value
            if isinstance(booster_type, BoosterType)
            else booster_type,
            cards=[CardPayload.from_card(card) for card in booster.cards],
            count=len(booster),
        )


class SealedRequest(BaseModel):
    """Request to open a sealed pool."""

    set_code: str = Field(..., min_length=1)
    booster_type: str = BoosterType.PLAY.value
    number_of_packs: int = Field(default=SEALED_DEFAULT_PACKS, ge=1, le=12)
    set_name: str = ""
    set_release_date: str | None = None
    seed: int | None = None


class SealedResponse(BaseModel):
    set_code: str
    packs: list[BoosterResponse]
    card_count: int
    arena_export: str
    scryfall_export: str


def _booster_types(released_at: str | None) -> list[BoosterType]:
    if not released_at:
        return [BoosterType.DRAFT]
    return available_booster_types(released_at)


@router.get("/sets", response_model=SetListResponse)
async def list_sets(
    source: Annotated[CardSource, Depends(get_card_source)],
) -> SetListResponse:
    """
    List sets that were sold in draft products, newest first.

    Each set lists the booster types it was printed in.
    """
    sets = await source.fetch_sets()
    ordered = sorted(sets, key=lambda s: s["released_at"] or "", reverse=True)
    responses = [
        SetResponse(
            code=s["code"],
            name=s["name"],
            released_at=s["released_at"],
            card_count=s["card_count"],
            booster_types=_booster_types(s["released_at"]),
        )
        for s in ordered
    ]
    return SetListResponse(sets=responses, count=len(responses))


@router.post("/boosters", response_model=BoosterResponse)
async def open_booster(
    request: BoosterRequest,
    source: Annotated[CardSource, Depends(get_card_source)],
) -> BoosterResponse:
    """
    Open a single booster.

    Unknown booster types open the generic layout of at most 14 cards.
    Returns 422 if the set has no booster-eligible cards.
    """
    settings = DraftSettings(
        set_code=request.set_code.lower(),
        booster_type=request.booster_type,
        number_of_packs=1,
        number_of_players=1,
        set_release_date=request.set_release_date,
    )
    boosters = await generate_draft_boosters(source, settings, rng=random.Random(request.seed))
    return BoosterResponse.from_booster(boosters[0][0])


@router.post("/sealed", response_model=SealedResponse)
async def open_sealed(
    request: SealedRequest,
    source: Annotated[CardSource, Depends(get_card_source)],
) -> SealedResponse:
    """
    Open a sealed pool with Arena and Scryfall exports of every card.

    Returns 422 if the set has no booster-eligible cards.
    """
    settings = DraftSettings(
        set_code=request.set_code.lower(),
        booster_type=request.booster_type,
        number_of_packs=request.number_of_packs,
        number_of_players=1,
        draft_mode=DraftMode.SEALED,
        set_name=request.set_name,
        set_release_date=request.set_release_date,
    )
    boosters = await open_sealed_pool(source, settings, rng=random.Random(request.seed))
    cards = [card for booster in boosters for card in booster.cards]
    title = request.set_name or request.set_code.upper()

    return SealedResponse(
        set_code=settings.set_code,
        packs=[BoosterResponse.from_booster(booster) for booster in boosters],
        card_count=len(cards),
        arena_export=format_arena_export(cards),
        scryfall_export=format_scryfall_export(cards, title),
    )

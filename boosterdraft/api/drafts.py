"""
Solo draft API endpoints.

One human seat against bots. The bots pick as soon as the human does,
so every accepted pick returns the next pack.
"""

import random
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from boosterdraft.api.dependencies import get_card_source, get_registry
from boosterdraft.config import settings as app_settings
from boosterdraft.models.booster import BoosterType
from boosterdraft.models.draft import DraftMode, DraftSettings
from boosterdraft.models.failure import InvalidSettingsError
from boosterdraft.models.messages import CardPayload
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.deck_export import format_arena_export, format_scryfall_export
from boosterdraft.services.solo_draft import DraftRegistry, SoloDraft

router = APIRouter(prefix="/drafts", tags=["drafts"])


class CreateDraftRequest(BaseModel):
    """Settings for a new solo draft."""

    set_code: str = Field(..., min_length=1)
    booster_type: str = BoosterType.PLAY.value
    number_of_packs: int = Field(default=3, ge=1, le=6)
    number_of_players: int = Field(default=8, ge=1)
    pick_time_seconds: int | None = Field(default=None, ge=0)
    player_name: str = "You"
    set_name: str = ""
    set_release_date: str | None = None
    seed: int | None = None


class DraftStateResponse(BaseModel):
    """The human seat's view of a draft."""

    draft_id: str
    set_code: str
    hand: list[CardPayload]
    pack_number: int
    pick_number: int
    total_packs: int
    waiting_for: list[str]
    picks: list[CardPayload]
    is_complete: bool
    auto_picks: int


class PickRequest(BaseModel):
    card_id: str = Field(..., min_length=1)
    foil: bool | None = None


class PickResponse(BaseModel):
    """Result of a pick. Rejected picks leave the state unchanged."""

    accepted: bool
    card: CardPayload | None = None
    state: DraftStateResponse


class ExportResponse(BaseModel):
    draft_id: str
    card_count: int
    arena: str
    scryfall: str


def _state(draft_id: str, draft: SoloDraft) -> DraftStateResponse:
    snapshot = draft.snapshot()
    return DraftStateResponse(
        draft_id=draft_id,
        set_code=draft.settings.set_code,
        hand=[CardPayload.from_card(card) for card in snapshot.hand],
        pack_number=snapshot.pack_number,
        pick_number=snapshot.pick_number,
        total_packs=draft.settings.number_of_packs,
        waiting_for=list(snapshot.waiting_for),
        picks=[CardPayload.from_card(card) for card in draft.human.picks],
        is_complete=snapshot.is_complete,
        auto_picks=draft.auto_picks,
    )


@router.post("", response_model=DraftStateResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    request: CreateDraftRequest,
    source: Annotated[CardSource, Depends(get_card_source)],
    registry: Annotated[DraftRegistry, Depends(get_registry)],
) -> DraftStateResponse:
    """
    Open the packs, seat the bots and deal the first pack.

    Returns 422 if the set has no booster-eligible cards, 502 if the
    card source is unavailable.
    """
    if request.number_of_players > app_settings.max_players:
        raise InvalidSettingsError(
            f"number_of_players must be at most {app_settings.max_players}, "
            f"got {request.number_of_players}"
        )

    pick_time = request.pick_time_seconds
    if pick_time is None:
        pick_time = app_settings.default_pick_time_seconds

    settings = DraftSettings(
        set_code=request.set_code.lower(),
        booster_type=request.booster_type,
        number_of_packs=request.number_of_packs,
        number_of_players=request.number_of_players,
        pick_time_seconds=pick_time,
        draft_mode=DraftMode.DRAFT,
        set_name=request.set_name,
        set_release_date=request.set_release_date,
    )
    draft = await SoloDraft.create(
        source, settings, rng=random.Random(request.seed), human_name=request.player_name
    )
    draft.start()
    draft_id = registry.add(draft)
    return _state(draft_id, draft)


@router.get("/{draft_id}", response_model=DraftStateResponse)
async def get_draft(
    draft_id: str,
    registry: Annotated[DraftRegistry, Depends(get_registry)],
) -> DraftStateResponse:
    """Current state of a draft. Returns 404 for unknown IDs."""
    return _state(draft_id, registry.get(draft_id))


@router.post("/{draft_id}/picks", response_model=PickResponse)
async def make_pick(
    draft_id: str,
    request: PickRequest,
    registry: Annotated[DraftRegistry, Depends(get_registry)],
) -> PickResponse:
    """
    Pick a card from the current hand.

    A card that is not in the hand, or a pick after the draft finished,
    is not an error: the response has accepted=false and the unchanged
    state.
    """
    draft = registry.get(draft_id)
    card = draft.pick(request.card_id, foil=request.foil)
    return PickResponse(
        accepted=card is not None,
        card=CardPayload.from_card(card) if card is not None else None,
        state=_state(draft_id, draft),
    )


@router.get("/{draft_id}/export", response_model=ExportResponse)
async def export_draft(
    draft_id: str,
    registry: Annotated[DraftRegistry, Depends(get_registry)],
) -> ExportResponse:
    """Export the human's picks so far in Arena and Scryfall formats."""
    draft = registry.get(draft_id)
    picks = list(draft.human.picks)
    title = draft.settings.set_name or draft.settings.set_code.upper()
    return ExportResponse(
        draft_id=draft_id,
        card_count=len(picks),
        arena=format_arena_export(picks),
        scryfall=format_scryfall_export(picks, title),
    )


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    draft_id: str,
    registry: Annotated[DraftRegistry, Depends(get_registry)],
) -> None:
    """Stop a draft's timer and forget it."""
    registry.remove(draft_id)

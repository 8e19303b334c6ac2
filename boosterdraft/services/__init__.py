"""
BoosterDraft services.

Booster generation, draft sessions and card data access.
"""

from boosterdraft.services.booster_generator import (
    BoosterGenerator,
    available_booster_types,
    generate_booster,
    generate_draft_boosters,
    open_sealed_pool,
)
from boosterdraft.services.bot_picker import DraftBot, choose_pick
from boosterdraft.services.card_source import (
    CardSource,
    ScryfallCardSource,
    StaticCardSource,
    filter_bonus_sheet,
)
from boosterdraft.services.deck_export import format_arena_export, format_scryfall_export
from boosterdraft.services.draft_engine import DraftEngine
from boosterdraft.services.host_session import GuestSession, HostSession
from boosterdraft.services.pick_timer import PickTimer
from boosterdraft.services.solo_draft import DraftRegistry, SoloDraft
from boosterdraft.services.transport import LocalHub, LocalTransport, PeerTransport

__all__ = [
    "BoosterGenerator",
    "CardSource",
    "DraftBot",
    "DraftEngine",
    "DraftRegistry",
    "GuestSession",
    "HostSession",
    "LocalHub",
    "LocalTransport",
    "PeerTransport",
    "PickTimer",
    "ScryfallCardSource",
    "SoloDraft",
    "StaticCardSource",
    "available_booster_types",
    "choose_pick",
    "filter_bonus_sheet",
    "format_arena_export",
    "format_scryfall_export",
    "generate_booster",
    "generate_draft_boosters",
    "open_sealed_pool",
]

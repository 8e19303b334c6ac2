from boosterdraft.models.booster import BOOSTER_SIZES, Booster, BoosterType, parse_booster_type
from boosterdraft.models.card import RARITIES, Card, CardFace
from boosterdraft.models.card_pool import CardPool, build_card_pool
from boosterdraft.models.draft import (
    DraftMode,
    DraftPhase,
    DraftSettings,
    DraftSnapshot,
    Seat,
)
from boosterdraft.models.failure import (
    ApiResponse,
    CardSourceError,
    DraftNotFoundError,
    EmptyCardPoolError,
    FailureDetail,
    FailureKind,
    InvalidSettingsError,
    KnownError,
    OutcomeType,
)
from boosterdraft.models.messages import (
    CardPayload,
    DraftStatePayload,
    MessageType,
    PeerMessage,
    PlayerInfo,
    PlayerPool,
)

__all__ = [
    "ApiResponse",
    "BOOSTER_SIZES",
    "Booster",
    "BoosterType",
    "Card",
    "CardFace",
    "CardPayload",
    "CardPool",
    "CardSourceError",
    "DraftMode",
    "DraftNotFoundError",
    "DraftPhase",
    "DraftSettings",
    "DraftSnapshot",
    "DraftStatePayload",
    "EmptyCardPoolError",
    "FailureDetail",
    "FailureKind",
    "InvalidSettingsError",
    "KnownError",
    "MessageType",
    "OutcomeType",
    "PeerMessage",
    "PlayerInfo",
    "PlayerPool",
    "RARITIES",
    "Seat",
    "build_card_pool",
    "parse_booster_type",
]

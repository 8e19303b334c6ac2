from boosterdraft.api.boosters import router as boosters_router
from boosterdraft.api.drafts import router as drafts_router
from boosterdraft.api.health import router as health_router
from boosterdraft.api.rooms import router as rooms_router

__all__ = [
    "boosters_router",
    "drafts_router",
    "health_router",
    "rooms_router",
]

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from boosterdraft.api import boosters_router, drafts_router, health_router, rooms_router
from boosterdraft.api.rooms import RoomManager
from boosterdraft.config import settings
from boosterdraft.models.failure import ApiResponse, KnownError
from boosterdraft.services.card_source import CardSource, ScryfallCardSource
from boosterdraft.services.solo_draft import DraftRegistry

logger = logging.getLogger(__name__)


async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render a KnownError as the failure envelope with its status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Keep raw tracebacks out of responses; log them instead."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content=ApiResponse.unknown_failure(detail=type(exc).__name__).model_dump(mode="json"),
    )


def create_app(card_source: CardSource | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        card_source: Source of card data. Defaults to a Scryfall client
            that is opened and closed with the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        owned: ScryfallCardSource | None = None
        if card_source is None:
            owned = ScryfallCardSource()
            app.state.card_source = owned
        try:
            yield
        finally:
            app.state.draft_registry.close_all()
            await app.state.room_manager.close_all()
            if owned is not None:
                await owned.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=pkg_version("boosterdraft"),
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.card_source = card_source
    app.state.draft_registry = DraftRegistry()
    app.state.room_manager = RoomManager()

    app.include_router(boosters_router)
    app.include_router(drafts_router)
    app.include_router(health_router)
    app.include_router(rooms_router)

    app.add_exception_handler(KnownError, known_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()

"""Liveness endpoint. Nothing is persisted, so there is no readiness check."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Report that the process is up. Scryfall is not contacted."""
    return HealthResponse(status="healthy", version=request.app.version)

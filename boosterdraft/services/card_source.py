"""
Card source service.

Fetches set card lists, the bonus sheet and draftable sets from the
Scryfall API and caches them in memory.

Search API: https://scryfall.com/docs/api/cards/search
"""

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

import httpx

from boosterdraft.config import BONUS_SHEET_WINDOW_MONTHS, MIN_BONUS_SHEET_SIZE, settings
from boosterdraft.models.card import Card
from boosterdraft.models.failure import CardSourceError
from boosterdraft.parsers.scryfall import SetData, is_draftable_set, parse_cards, parse_set

logger = logging.getLogger(__name__)

# Set code of The List, the play-booster bonus sheet
BONUS_SHEET_SET_CODE = "plst"


class CardSource(Protocol):
    """Anything that can supply set printings, the bonus sheet and the set list."""

    async def fetch_set_cards(self, set_code: str) -> list[Card]: ...

    async def fetch_bonus_sheet(self, release_date: str | None = None) -> list[Card]: ...

    async def fetch_sets(self) -> list[SetData]: ...


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def filter_bonus_sheet(cards: Iterable[Card], release_date: str | None) -> list[Card]:
    """
    Narrow the bonus sheet to cards released around a set.

    Args:
        cards: Every bonus-sheet card
        release_date: ISO release date of the set being opened

    Returns:
        Cards released within six months of release_date, or every card
        if no date is given or fewer than MIN_BONUS_SHEET_SIZE match
    """
    all_cards = list(cards)
    target = _parse_date(release_date)
    if target is None:
        return all_cards

    # Months are counted as 30 days
    window_days = BONUS_SHEET_WINDOW_MONTHS * 30
    filtered = []
    for card in all_cards:
        released = _parse_date(card.released_at)
        if released is not None and abs((target - released).days) <= window_days:
            filtered.append(card)

    return filtered if len(filtered) >= MIN_BONUS_SHEET_SIZE else all_cards


@dataclass
class StaticCardSource:
    """
    Card source backed by lists already in memory.

    Used for tests, the CLI with a local dump, and replays.
    """

    sets: dict[str, list[Card]] = field(default_factory=dict)
    bonus_sheet: list[Card] = field(default_factory=list)
    set_list: list[SetData] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sets = {code.lower(): cards for code, cards in self.sets.items()}

    async def fetch_set_cards(self, set_code: str) -> list[Card]:
        return list(self.sets.get(set_code.lower(), []))

    async def fetch_bonus_sheet(self, release_date: str | None = None) -> list[Card]:
        return filter_bonus_sheet(self.bonus_sheet, release_date)

    async def fetch_sets(self) -> list[SetData]:
        return [s for s in self.set_list if is_draftable_set(s)]


@dataclass
class _CacheEntry:
    value: Any
    stored_at: float


class ScryfallCardSource:
    """
    Rate-limited Scryfall client with an in-memory TTL cache.

    Usage:
        async with ScryfallCardSource() as source:
            cards = await source.fetch_set_cards("mkm")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        rate_limit_ms: int | None = None,
        set_cache_ttl: float | None = None,
        sets_cache_ttl: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.request_timeout_seconds,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        )
        self._base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._min_interval = (
            rate_limit_ms if rate_limit_ms is not None else settings.rate_limit_ms
        ) / 1000
        self._set_cache_ttl = (
            set_cache_ttl if set_cache_ttl is not None else settings.set_cache_ttl_seconds
        )
        self._sets_cache_ttl = (
            sets_cache_ttl if sets_cache_ttl is not None else settings.sets_cache_ttl_seconds
        )
        self._cache: dict[str, _CacheEntry] = {}
        self._rate_lock = asyncio.Lock()
        self._last_request = 0.0

    async def __aenter__(self) -> "ScryfallCardSource":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cached(self, key: str, ttl: float) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if time.monotonic() - entry.stored_at >= ttl:
            del self._cache[key]
            return None
        return entry.value

    def _store(self, key: str, value: Any) -> None:
        self._cache[key] = _CacheEntry(value=value, stored_at=time.monotonic())

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        """GET with at most one request per rate-limit interval."""
        async with self._rate_lock:
            wait = self._min_interval - (time.monotonic() - self._last_request)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = time.monotonic()
            try:
                return await self._client.get(url, params=params)
            except httpx.HTTPError as e:
                raise CardSourceError(
                    "Could not reach Scryfall.",
                    detail=str(e),
                ) from e

    async def _search(self, query: str) -> list[dict[str, Any]]:
        """
        Run a card search and follow every result page.

        Returns:
            Raw card objects; empty if Scryfall reports no matches (404)

        Raises:
            CardSourceError: On any other non-success status
        """
        objects: list[dict[str, Any]] = []
        url: str | None = f"{self._base_url}/cards/search"
        params: dict[str, str] | None = {"q": query, "unique": "prints"}

        while url:
            response = await self._get(url, params=params)

            if response.status_code == 404:
                return []
            if response.is_error:
                raise CardSourceError(
                    f"Failed to fetch cards: {response.status_code}",
                    detail=f"query={query!r}",
                )

            body = response.json()
            objects.extend(body.get("data", []))
            url = body.get("next_page") if body.get("has_more") else None
            # next_page already carries the query string
            params = None

        return objects

    async def fetch_set_cards(self, set_code: str) -> list[Card]:
        """
        Fetch every printing in a set except tokens, art cards and digital cards.

        Booster-fun filtering happens in the pool builder, not here.

        Args:
            set_code: Scryfall set code

        Returns:
            Parsed cards; empty if the set has no matching cards
        """
        set_code = set_code.lower()
        key = f"cards:{set_code}"
        cached = self._cached(key, self._set_cache_ttl)
        if cached is not None:
            return list(cached)

        logger.info("Fetching cards for set %s", set_code)
        objects = await self._search(f"e:{set_code} -is:token -is:art_series -is:digital")
        cards = parse_cards(objects)
        self._store(key, cards)
        logger.info("Fetched %d cards for set %s", len(cards), set_code)
        return list(cards)

    async def fetch_bonus_sheet(self, release_date: str | None = None) -> list[Card]:
        """
        Fetch The List, narrowed to cards released around release_date.

        Args:
            release_date: ISO release date of the set being opened
        """
        key = f"cards:{BONUS_SHEET_SET_CODE}"
        cards = self._cached(key, self._set_cache_ttl)
        if cards is None:
            logger.info("Fetching bonus sheet")
            cards = parse_cards(await self._search(f"e:{BONUS_SHEET_SET_CODE}"))
            self._store(key, cards)

        return filter_bonus_sheet(cards, release_date)

    async def fetch_sets(self) -> list[SetData]:
        """Fetch sets that are opened in draft boosters."""
        cached = self._cached("sets", self._sets_cache_ttl)
        if cached is not None:
            return list(cached)

        response = await self._get(f"{self._base_url}/sets")
        if response.is_error:
            raise CardSourceError(f"Failed to fetch sets: {response.status_code}")

        sets = [parse_set(obj) for obj in response.json().get("data", [])]
        draftable = [s for s in sets if is_draftable_set(s)]
        self._store("sets", draftable)
        return list(draftable)

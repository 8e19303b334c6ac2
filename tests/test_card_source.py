"""Tests for card sources and the bonus sheet filter."""

import httpx
import pytest
import respx

from boosterdraft.models.card import Card
from boosterdraft.models.failure import CardSourceError
from boosterdraft.services.card_source import (
    BONUS_SHEET_SET_CODE,
    ScryfallCardSource,
    StaticCardSource,
    filter_bonus_sheet,
)
from conftest import make_card

SEARCH_URL = "https://api.scryfall.com/cards/search"
SETS_URL = "https://api.scryfall.com/sets"


def _card_json(card_id: str, rarity: str = "common") -> dict:
    return {
        "object": "card",
        "id": card_id,
        "name": f"Card {card_id}",
        "set": "tst",
        "set_name": "Test Set",
        "collector_number": card_id,
        "rarity": rarity,
        "type_line": "Creature — Elf",
        "booster": True,
        "finishes": ["nonfoil", "foil"],
        "released_at": "2024-04-19",
    }


def _set_json(code: str, set_type: str) -> dict:
    return {
        "object": "set",
        "code": code,
        "name": code.upper(),
        "set_type": set_type,
        "released_at": "2024-02-09",
        "card_count": 250,
    }


def _page(cards: list[dict], next_page: str | None = None) -> dict:
    return {
        "object": "list",
        "has_more": next_page is not None,
        "next_page": next_page,
        "data": cards,
    }


@pytest.fixture
async def source():
    async with ScryfallCardSource(rate_limit_ms=0) as scryfall:
        yield scryfall


class TestFetchSetCards:
    @respx.mock
    async def test_fetches_and_parses(self, source: ScryfallCardSource) -> None:
        """A set search is fetched and parsed into cards."""
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page([_card_json("1"), _card_json("2")]))
        )

        cards = await source.fetch_set_cards("TST")

        assert [card.id for card in cards] == ["1", "2"]
        assert cards[0].booster is True
        request = route.calls.last.request
        assert request.url.params["q"] == "e:tst -is:token -is:art_series -is:digital"
        assert request.url.params["unique"] == "prints"

    @respx.mock
    async def test_follows_pages(self, source: ScryfallCardSource) -> None:
        """Paged results are followed to the end."""
        next_page = f"{SEARCH_URL}?page=2&q=e%3Atst&unique=prints"
        route = respx.get(SEARCH_URL).mock(
            side_effect=[
                httpx.Response(200, json=_page([_card_json("1")], next_page=next_page)),
                httpx.Response(200, json=_page([_card_json("2")])),
            ]
        )

        cards = await source.fetch_set_cards("tst")

        assert [card.id for card in cards] == ["1", "2"]
        assert route.call_count == 2
        assert route.calls[1].request.url.params["page"] == "2"

    @respx.mock
    async def test_not_found_is_empty(self, source: ScryfallCardSource) -> None:
        """A 404 search means an empty set."""
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))
        assert await source.fetch_set_cards("nope") == []

    @respx.mock
    async def test_server_error_raises(self, source: ScryfallCardSource) -> None:
        """Server errors raise CardSourceError."""
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(CardSourceError, match="Failed to fetch cards"):
            await source.fetch_set_cards("tst")

    @respx.mock
    async def test_connection_error_raises(self, source: ScryfallCardSource) -> None:
        respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectError)

        with pytest.raises(CardSourceError) as exc_info:
            await source.fetch_set_cards("tst")
        assert exc_info.value.status_code == 502

    @respx.mock
    async def test_caches_set(self, source: ScryfallCardSource) -> None:
        """A second fetch is served from the cache."""
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page([_card_json("1")]))
        )

        first = await source.fetch_set_cards("tst")
        second = await source.fetch_set_cards("TST")

        assert first == second
        assert route.call_count == 1

    @respx.mock
    async def test_expired_cache_refetches(self) -> None:
        """Stale cache entries are fetched again."""
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page([_card_json("1")]))
        )

        async with ScryfallCardSource(rate_limit_ms=0, set_cache_ttl=0) as scryfall:
            await scryfall.fetch_set_cards("tst")
            await scryfall.fetch_set_cards("tst")

        assert route.call_count == 2

    @respx.mock
    async def test_clear_cache(self, source: ScryfallCardSource) -> None:
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page([_card_json("1")]))
        )

        await source.fetch_set_cards("tst")
        source.clear_cache()
        await source.fetch_set_cards("tst")

        assert route.call_count == 2


class TestFetchBonusSheet:
    @respx.mock
    async def test_searches_the_list(self, source: ScryfallCardSource) -> None:
        """The bonus sheet comes from the list set search."""
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=_page([_card_json("p1", "rare")]))
        )

        cards = await source.fetch_bonus_sheet()

        assert [card.id for card in cards] == ["p1"]
        assert route.calls.last.request.url.params["q"] == f"e:{BONUS_SHEET_SET_CODE}"


class TestFetchSets:
    @respx.mock
    async def test_keeps_draftable_sets(self, source: ScryfallCardSource) -> None:
        """Only draftable sets are returned."""
        respx.get(SETS_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "object": "list",
                    "data": [
                        _set_json("mkm", "expansion"),
                        _set_json("tmkm", "token"),
                        _set_json("mh3", "draft_innovation"),
                    ],
                },
            )
        )

        sets = await source.fetch_sets()

        assert [s["code"] for s in sets] == ["mkm", "mh3"]

    @respx.mock
    async def test_error_raises(self, source: ScryfallCardSource) -> None:
        """A failing set list raises CardSourceError."""
        respx.get(SETS_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(CardSourceError):
            await source.fetch_sets()


def _list_card(index: int, released_at: str) -> Card:
    return make_card(f"plst-{index}", "rare", set_code="plst", released_at=released_at)


class TestFilterBonusSheet:
    def test_no_date_keeps_everything(self, bonus_sheet: list[Card]) -> None:
        """Without a release date the whole sheet is kept."""
        assert filter_bonus_sheet(bonus_sheet, None) == bonus_sheet

    def test_small_window_falls_back_to_everything(self, bonus_sheet: list[Card]) -> None:
        """Too few dated cards keep the whole sheet."""
        # About a dozen monthly cards fall inside a one-year window
        assert filter_bonus_sheet(bonus_sheet, "2022-06-15") == bonus_sheet

    def test_large_window_is_used(self) -> None:
        """Enough dated cards narrow the sheet."""
        near = [_list_card(i, "2024-03-01") for i in range(55)]
        far = [_list_card(100 + i, "2015-03-01") for i in range(10)]

        filtered = filter_bonus_sheet(near + far, "2024-02-09")

        assert filtered == near

    def test_exactly_fifty_is_enough(self) -> None:
        """Fifty cards is enough to narrow."""
        near = [_list_card(i, "2024-03-01") for i in range(50)]
        far = [_list_card(100, "2010-01-01")]
        assert filter_bonus_sheet(near + far, "2024-02-09") == near

    def test_bad_date_keeps_everything(self, bonus_sheet: list[Card]) -> None:
        """An unparsable date keeps the whole sheet."""
        assert filter_bonus_sheet(bonus_sheet, "not a date") == bonus_sheet


class TestStaticCardSource:
    async def test_lookup_ignores_case(self) -> None:
        """Set codes match regardless of case."""
        card = make_card("t-1")
        source = StaticCardSource(sets={"TST": [card]})
        assert await source.fetch_set_cards("tst") == [card]
        assert await source.fetch_set_cards("TsT") == [card]

    async def test_unknown_set_is_empty(self) -> None:
        assert await StaticCardSource().fetch_set_cards("tst") == []

    async def test_fetch_sets_filters(self, card_source: StaticCardSource) -> None:
        """Non-draftable sets are filtered out."""
        codes = [s["code"] for s in await card_source.fetch_sets()]
        assert "ptk" not in codes
        assert "tst" in codes

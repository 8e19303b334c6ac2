"""
Run a complete bot draft (or open a sealed pool) from the command line.

Every seat is a bot. Prints the first seat's picks in Arena format.

Usage:
    python -m boosterdraft.jobs.simulate_draft mkm --players 8 --seed 42
    python -m boosterdraft.jobs.simulate_draft mkm --sealed --packs 6
    python -m boosterdraft.jobs.simulate_draft tst --cards-file cards.json
"""

import argparse
import asyncio
import json
import logging
import random
from pathlib import Path

from boosterdraft.models.booster import BoosterType
from boosterdraft.models.draft import DraftMode, DraftSettings, Seat
from boosterdraft.models.failure import KnownError
from boosterdraft.parsers.scryfall import parse_cards
from boosterdraft.services.booster_generator import generate_draft_boosters, open_sealed_pool
from boosterdraft.services.bot_picker import bot_name
from boosterdraft.services.card_source import CardSource, ScryfallCardSource, StaticCardSource
from boosterdraft.services.deck_export import format_arena_export
from boosterdraft.services.draft_engine import DraftEngine
from boosterdraft.services.solo_draft import boosters_to_packs

logger = logging.getLogger(__name__)


async def simulate_draft(
    source: CardSource,
    settings: DraftSettings,
    rng: random.Random | None = None,
) -> DraftEngine:
    """
    Draft with bots in every seat until the last pack is empty.

    Returns:
        The completed engine
    """
    boosters = await generate_draft_boosters(source, settings, rng=rng)
    seats = [
        Seat(seat_id=f"bot-{i}", name=bot_name(i), is_bot=True)
        for i in range(settings.number_of_players)
    ]
    engine = DraftEngine(seats, boosters_to_packs(boosters))
    engine.start()
    picks = engine.play_bots()
    logger.info("Simulated draft finished with %d picks", picks)
    return engine


async def simulate_sealed(
    source: CardSource,
    settings: DraftSettings,
    rng: random.Random | None = None,
) -> str:
    """Open a sealed pool and return it in Arena format."""
    boosters = await open_sealed_pool(source, settings, rng=rng)
    cards = [card for booster in boosters for card in booster.cards]
    logger.info("Opened %d sealed boosters, %d cards", len(boosters), len(cards))
    return format_arena_export(cards)


def load_cards_file(path: Path, set_code: str) -> StaticCardSource:
    """
    Card source from a saved Scryfall search or bulk-data file.

    Accepts a JSON list of card objects or a search page with "data".
    """
    raw = json.loads(path.read_text(encoding="utf-8"))
    objects = raw.get("data", []) if isinstance(raw, dict) else raw
    return StaticCardSource(sets={set_code: parse_cards(objects)})


async def run(args: argparse.Namespace) -> str:
    settings = DraftSettings(
        set_code=args.set_code.lower(),
        booster_type=args.booster_type,
        number_of_packs=args.packs,
        number_of_players=1 if args.sealed else args.players,
        draft_mode=DraftMode.SEALED if args.sealed else DraftMode.DRAFT,
        set_release_date=args.release_date,
    )
    rng = random.Random(args.seed)

    if args.cards_file is not None:
        source: CardSource = load_cards_file(args.cards_file, settings.set_code)
        return await _simulate(source, settings, rng, sealed=args.sealed)

    async with ScryfallCardSource() as scryfall:
        return await _simulate(scryfall, settings, rng, sealed=args.sealed)


async def _simulate(
    source: CardSource, settings: DraftSettings, rng: random.Random, *, sealed: bool
) -> str:
    if sealed:
        return await simulate_sealed(source, settings, rng)
    engine = await simulate_draft(source, settings, rng)
    return format_arena_export(engine.seats[0].picks)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simulate_draft",
        description="Simulate a bot draft or open a sealed pool.",
    )
    parser.add_argument("set_code", help="Scryfall set code, e.g. mkm")
    parser.add_argument(
        "--booster-type",
        default=BoosterType.PLAY.value,
        help="play, draft or set (anything else opens the generic layout)",
    )
    parser.add_argument("--packs", type=int, default=3, help="Packs per seat")
    parser.add_argument("--players", type=int, default=8, help="Seats at the table")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible packs")
    parser.add_argument("--sealed", action="store_true", help="Open a sealed pool instead")
    parser.add_argument("--release-date", default=None, help="Set release date (YYYY-MM-DD)")
    parser.add_argument(
        "--cards-file",
        type=Path,
        default=None,
        help="Read cards from a saved Scryfall JSON file instead of the API",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for draft simulation."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    try:
        output = asyncio.run(run(args))
    except KnownError as e:
        logger.error("%s", e.message)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Solo draft session - one human against bots.

The human sits at seat 0. Every human pick is followed by all bot picks,
which completes the round and passes the packs. With a pick time budget,
an expired timer picks the first card of the human's hand.
"""

import logging
import random
import uuid
from collections.abc import Sequence

from boosterdraft.models.booster import Booster
from boosterdraft.models.card import Card
from boosterdraft.models.draft import DraftSettings, DraftSnapshot, Seat
from boosterdraft.models.failure import DraftNotFoundError
from boosterdraft.services.booster_generator import generate_draft_boosters
from boosterdraft.services.bot_picker import bot_name
from boosterdraft.services.card_source import CardSource
from boosterdraft.services.draft_engine import DraftEngine
from boosterdraft.services.pick_timer import PickTimer

logger = logging.getLogger(__name__)

HUMAN_SEAT_ID = "player"


def boosters_to_packs(boosters: Sequence[Sequence[Booster]]) -> list[list[list[Card]]]:
    """Strip boosters down to [round][seat] card lists."""
    return [[list(booster.cards) for booster in round_boosters] for round_boosters in boosters]


class SoloDraft:
    """
    Usage:
        draft = await SoloDraft.create(source, settings)
        draft.start()
        draft.pick(card_id)
    """

    def __init__(
        self,
        settings: DraftSettings,
        packs: Sequence[Sequence[Sequence[Card]]],
        *,
        human_name: str = "You",
    ) -> None:
        self.settings = settings
        self._human = Seat(seat_id=HUMAN_SEAT_ID, name=human_name)
        seats = [self._human]
        seats.extend(
            Seat(seat_id=f"bot-{i}", name=bot_name(i - 1), is_bot=True)
            for i in range(1, settings.number_of_players)
        )
        self.engine = DraftEngine(seats, packs)
        self.timer = PickTimer(settings.pick_time_seconds, self._on_timeout)
        self.auto_picks = 0

    @classmethod
    async def create(
        cls,
        source: CardSource,
        settings: DraftSettings,
        *,
        rng: random.Random | None = None,
        human_name: str = "You",
    ) -> "SoloDraft":
        """
        Open every pack for the draft and seat the bots.

        Raises:
            EmptyCardPoolError: If the set has no cards
        """
        boosters = await generate_draft_boosters(source, settings, rng=rng)
        return cls(settings, boosters_to_packs(boosters), human_name=human_name)

    @property
    def is_complete(self) -> bool:
        return self.engine.is_complete

    @property
    def human(self) -> Seat:
        return self._human

    def snapshot(self) -> DraftSnapshot:
        snapshot = self.engine.snapshot(HUMAN_SEAT_ID)
        if snapshot is None:
            raise LookupError(f"Seat {HUMAN_SEAT_ID!r} is not in the draft")
        return snapshot

    def start(self) -> None:
        """Deal the first packs and start the clock."""
        self.engine.start()
        self._advance()

    def pick(self, card_id: str, *, foil: bool | None = None) -> Card | None:
        """
        Make the human pick, then let the bots pick.

        Returns:
            The picked card, or None if the pick was rejected
        """
        card = self.engine.pick(HUMAN_SEAT_ID, card_id, foil=foil)
        if card is None:
            return None
        self._advance()
        return card

    def _advance(self) -> None:
        self.engine.play_bots()
        if self.engine.is_complete:
            self.timer.cancel()
        else:
            self.timer.restart()

    def _on_timeout(self) -> None:
        hand = self.human.hand
        if not hand or self.engine.is_complete:
            return
        logger.info("Pick timer expired, auto-picking %s", hand[0].name)
        self.auto_picks += 1
        if self.engine.auto_pick(HUMAN_SEAT_ID) is not None:
            self._advance()

    def close(self) -> None:
        """Stop the clock; the draft can be discarded afterwards."""
        self.timer.cancel()


class DraftRegistry:
    """Live solo drafts by ID. One registry per application."""

    def __init__(self) -> None:
        self._drafts: dict[str, SoloDraft] = {}

    def __len__(self) -> int:
        return len(self._drafts)

    def add(self, draft: SoloDraft) -> str:
        draft_id = uuid.uuid4().hex
        self._drafts[draft_id] = draft
        logger.info("Registered draft %s for %s", draft_id, draft.settings.set_code)
        return draft_id

    def get(self, draft_id: str) -> SoloDraft:
        """
        Raises:
            DraftNotFoundError: If no draft has this ID
        """
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        return draft

    def remove(self, draft_id: str) -> None:
        draft = self._drafts.pop(draft_id, None)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        draft.close()

    def close_all(self) -> None:
        for draft in self._drafts.values():
            draft.close()
        self._drafts.clear()

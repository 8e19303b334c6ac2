"""
Draft rotation engine.

Holds every seat's hand and applies pick-then-pass rotation:

    dealing -> awaiting_picks -> rotating -> awaiting_picks -> ... -> complete

INVARIANT: Each seat holds exactly one hand at any instant.

INVARIANT: Within a pack round, cards in hands plus cards picked this
round equal the cards dealt for the round. Rotation never creates or
drops a card.

INVARIANT: Packs pass to the left on even pack indexes (each seat gets the
previous seat's hand) and to the right on odd ones. Direction alternates
per pack, never per pick.

Bad picks (unknown seat, card not in hand, second pick in a round, draft
not running) are no-ops that return None. Every operation runs to
completion before returning; callers must not interleave operations on
the same engine from different threads.
"""

import logging
from collections.abc import Callable, Sequence

from boosterdraft.models.card import Card
from boosterdraft.models.draft import DraftPhase, DraftSnapshot, Seat
from boosterdraft.models.failure import InvalidSettingsError
from boosterdraft.services.bot_picker import DraftBot

logger = logging.getLogger(__name__)

DraftListener = Callable[["DraftEngine"], None]


class DraftEngine:
    """
    Authoritative state of one draft.

    Usage:
        engine = DraftEngine(seats, packs)  # packs[round][seat]
        engine.start()
        engine.pick("seat-0", card_id)
        engine.play_bots()
    """

    def __init__(self, seats: Sequence[Seat], packs: Sequence[Sequence[Sequence[Card]]]) -> None:
        if not seats:
            raise InvalidSettingsError("A draft needs at least one seat.")
        if not packs:
            raise InvalidSettingsError("A draft needs at least one pack round.")
        for round_index, round_packs in enumerate(packs):
            if len(round_packs) != len(seats):
                raise InvalidSettingsError(
                    f"Pack round {round_index} has {len(round_packs)} packs "
                    f"for {len(seats)} seats."
                )

        seat_ids = [seat.seat_id for seat in seats]
        if len(set(seat_ids)) != len(seat_ids):
            raise InvalidSettingsError("Seat IDs must be unique.")

        self.seats: list[Seat] = list(seats)
        self._packs: list[list[list[Card]]] = [
            [list(pack) for pack in round_packs] for round_packs in packs
        ]
        self.pack_count = len(self._packs)
        self.pack_index = 0
        self.pick_index = 0
        self.phase = DraftPhase.DEALING
        self._started = False
        self._dealt: list[Card] = []
        self._round_start: dict[str, int] = {}
        self._listeners: list[DraftListener] = []

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: DraftListener) -> Callable[[], None]:
        """
        Register a callback run after every deal, pass and completion.

        Returns:
            A function that removes the callback
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_complete(self) -> bool:
        return self.phase is DraftPhase.COMPLETE

    @property
    def is_running(self) -> bool:
        return self.phase is DraftPhase.AWAITING_PICKS

    def seat(self, seat_id: str) -> Seat | None:
        return next((seat for seat in self.seats if seat.seat_id == seat_id), None)

    def waiting_for(self) -> list[str]:
        """Names of seats that still have to pick this round."""
        if not self.is_running:
            return []
        return [seat.name for seat in self.seats if not seat.has_picked]

    def snapshot(self, seat_id: str) -> DraftSnapshot | None:
        """
        Current view for one seat, built from live state.

        Returns:
            None if the seat is unknown
        """
        seat = self.seat(seat_id)
        if seat is None:
            return None

        picks_this_round = len(seat.picks) - self._round_start.get(seat_id, len(seat.picks))
        return DraftSnapshot(
            hand=tuple(seat.hand),
            pack_number=min(self.pack_index, self.pack_count - 1) + 1,
            pick_number=picks_this_round + 1,
            waiting_for=tuple(self.waiting_for()),
            is_complete=self.is_complete,
        )

    def final_pools(self) -> dict[str, list[Card]]:
        """Each seat's picks in pick order."""
        return {seat.seat_id: list(seat.picks) for seat in self.seats}

    def dealt_cards(self) -> list[Card]:
        """Every card dealt so far, across all rounds."""
        return list(self._dealt)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Deal the first pack round. Later calls do nothing."""
        if self._started:
            return
        self._started = True
        self._deal()
        self._notify()

    def _deal(self) -> None:
        """Open the round at pack_index, skipping rounds with nothing in them."""
        self.phase = DraftPhase.DEALING

        while self.pack_index < self.pack_count:
            round_packs = self._packs[self.pack_index]
            for seat, pack in zip(self.seats, round_packs, strict=True):
                seat.hand = list(pack)
                seat.has_picked = not seat.hand
                self._dealt.extend(pack)
            self._round_start = {seat.seat_id: len(seat.picks) for seat in self.seats}
            self.pick_index = 0

            if any(seat.hand for seat in self.seats):
                self.phase = DraftPhase.AWAITING_PICKS
                logger.debug("Dealt pack %d of %d", self.pack_index + 1, self.pack_count)
                return

            self.pack_index += 1

        self._complete()

    def _complete(self) -> None:
        for seat in self.seats:
            seat.hand = []
            seat.has_picked = False
        self.phase = DraftPhase.COMPLETE
        logger.info("Draft complete after %d packs", self.pack_count)

    def _rotate(self) -> None:
        """Pass hands once every seat has picked, or open the next round."""
        self.phase = DraftPhase.ROTATING

        if all(not seat.hand for seat in self.seats):
            self.pack_index += 1
            self._deal()
            return

        count = len(self.seats)
        hands = [seat.hand for seat in self.seats]
        offset = -1 if self.pack_index % 2 == 0 else 1

        for index, seat in enumerate(self.seats):
            seat.hand = hands[(index + offset) % count]
            # An emptied hand has nothing left to pick
            seat.has_picked = not seat.hand

        self.pick_index += 1
        self.phase = DraftPhase.AWAITING_PICKS

    def pick(self, seat_id: str, card_id: str, *, foil: bool | None = None) -> Card | None:
        """
        Take a card from a seat's hand.

        Args:
            seat_id: Seat making the pick
            card_id: ID of a card in that seat's hand
            foil: Match only the foil (True) or non-foil (False) copy

        Returns:
            The picked card, or None if the pick was rejected
        """
        if not self.is_running:
            logger.debug("Rejected pick from %s: draft is %s", seat_id, self.phase.value)
            return None

        seat = self.seat(seat_id)
        if seat is None:
            logger.debug("Rejected pick from unknown seat %s", seat_id)
            return None

        if seat.has_picked:
            logger.debug("Rejected pick from %s: already picked this round", seat_id)
            return None

        index = next(
            (
                i
                for i, card in enumerate(seat.hand)
                if card.id == card_id and (foil is None or card.is_foil == foil)
            ),
            None,
        )
        if index is None:
            logger.debug("Rejected pick from %s: card %s not in hand", seat_id, card_id)
            return None

        card = seat.hand.pop(index)
        seat.picks.append(card)
        seat.has_picked = True

        if all(s.has_picked for s in self.seats):
            self._rotate()
            self._notify()

        return card

    def auto_pick(self, seat_id: str) -> Card | None:
        """Pick the first card in a seat's hand."""
        seat = self.seat(seat_id)
        if seat is None or not seat.hand:
            return None
        first = seat.hand[0]
        return self.pick(seat_id, first.id, foil=first.is_foil)

    def play_bots(self) -> int:
        """
        Make every pending bot pick.

        Keeps going through passes while only bots are left to pick, so an
        all-bot draft runs to completion in one call.

        Returns:
            Number of picks made
        """
        made = 0
        while self.is_running:
            pending = [seat for seat in self.seats if seat.is_bot and not seat.has_picked]
            if not pending:
                break
            made_this_pass = 0
            for seat in pending:
                bot = DraftBot(seat)
                choice = bot.choose()
                if choice is None:
                    continue
                picked = self.pick(seat.seat_id, choice.id, foil=choice.is_foil)
                if picked is not None:
                    bot.remember(picked)
                    made_this_pass += 1
            if made_this_pass == 0:
                break
            made += made_this_pass
        return made

"""
Tests for the draft rotation engine.

These tests protect the rotation invariants:
- a seat picks at most once per round
- pass direction alternates per pack
- no card is created or lost between dealing and completion
"""

import random
from collections import Counter

import pytest

from boosterdraft.models.card import Card
from boosterdraft.models.draft import DraftPhase, Seat
from boosterdraft.models.failure import InvalidSettingsError
from boosterdraft.services.draft_engine import DraftEngine
from conftest import make_card, make_set


def _seats(count: int, *, bots: bool = False) -> list[Seat]:
    return [Seat(seat_id=f"s{i}", name=f"Seat {i}", is_bot=bots) for i in range(count)]


def _packs(rounds: int, seats: int, size: int) -> list[list[list[Card]]]:
    return [
        [[make_card(f"r{r}s{s}-{c}") for c in range(size)] for s in range(seats)]
        for r in range(rounds)
    ]


def _ids(cards: list[Card]) -> list[str]:
    return [card.id for card in cards]


class TestConstruction:
    def test_requires_seats(self) -> None:
        """An engine without seats is rejected."""
        with pytest.raises(InvalidSettingsError):
            DraftEngine([], _packs(1, 1, 3))

    def test_requires_packs(self) -> None:
        """An engine without pack rounds is rejected."""
        with pytest.raises(InvalidSettingsError):
            DraftEngine(_seats(2), [])

    def test_pack_count_must_match_seats(self) -> None:
        """Each round needs one pack per seat."""
        with pytest.raises(InvalidSettingsError):
            DraftEngine(_seats(3), _packs(1, 2, 3))

    def test_seat_ids_unique(self) -> None:
        """Duplicate seat IDs are rejected."""
        seats = [Seat(seat_id="x", name="A"), Seat(seat_id="x", name="B")]
        with pytest.raises(InvalidSettingsError):
            DraftEngine(seats, _packs(1, 2, 3))

    def test_not_running_before_start(self) -> None:
        engine = DraftEngine(_seats(2), _packs(1, 2, 3))
        assert engine.phase is DraftPhase.DEALING
        assert engine.pick("s0", "r0s0-0") is None


class TestScriptedDraft:
    def test_two_seats_one_pack(self) -> None:
        """A scripted two-seat draft passes and completes as expected."""
        a, b, c = make_card("A"), make_card("B"), make_card("C")
        d, e, f = make_card("D"), make_card("E"), make_card("F")
        engine = DraftEngine(_seats(2), [[[a, b, c], [d, e, f]]])
        engine.start()

        assert engine.pick("s0", "B") == b
        assert engine.waiting_for() == ["Seat 1"]
        assert engine.pick("s1", "D") == d

        # Pack 0 passes left: each seat gets the previous seat's hand
        assert _ids(engine.seats[0].hand) == ["E", "F"]
        assert _ids(engine.seats[1].hand) == ["A", "C"]

        engine.pick("s0", "E")
        engine.pick("s1", "A")
        assert _ids(engine.seats[0].hand) == ["C"]
        assert _ids(engine.seats[1].hand) == ["F"]

        engine.pick("s0", "C")
        engine.pick("s1", "F")

        assert engine.is_complete
        assert _ids(engine.seats[0].picks) == ["B", "E", "C"]
        assert _ids(engine.seats[1].picks) == ["D", "A", "F"]
        assert engine.seats[0].hand == []


class TestPickGuards:
    def test_same_pick_twice_adds_one_card(self) -> None:
        """Repeating a pick in the same round is ignored."""
        engine = DraftEngine(_seats(2), _packs(1, 2, 3))
        engine.start()

        assert engine.pick("s0", "r0s0-0") is not None
        assert engine.pick("s0", "r0s0-0") is None
        assert engine.pick("s0", "r0s0-1") is None
        assert len(engine.seats[0].picks) == 1

    def test_unknown_seat(self) -> None:
        """Picks from unknown seats are refused."""
        engine = DraftEngine(_seats(2), _packs(1, 2, 3))
        engine.start()
        assert engine.pick("ghost", "r0s0-0") is None

    def test_card_not_in_hand(self) -> None:
        """Picks of cards outside the hand are refused."""
        engine = DraftEngine(_seats(2), _packs(1, 2, 3))
        engine.start()
        assert engine.pick("s0", "r0s1-0") is None
        assert engine.seats[0].has_picked is False

    def test_pick_after_completion(self) -> None:
        """Picks after completion are refused."""
        engine = DraftEngine(_seats(1), _packs(1, 1, 1))
        engine.start()
        engine.pick("s0", "r0s0-0")
        assert engine.is_complete
        assert engine.pick("s0", "r0s0-0") is None

    def test_foil_flag_selects_copy(self) -> None:
        """The foil flag picks the matching copy."""
        plain = make_card("X")
        foil = plain.as_foil()
        engine = DraftEngine(_seats(1), [[[plain, foil]]])
        engine.start()

        picked = engine.pick("s0", "X", foil=True)

        assert picked is not None and picked.is_foil
        assert engine.seats[0].hand == [plain]

    def test_start_is_idempotent(self) -> None:
        """Starting twice deals only once."""
        engine = DraftEngine(_seats(2), _packs(2, 2, 3))
        engine.start()
        engine.pick("s0", "r0s0-0")
        engine.start()
        assert len(engine.seats[0].hand) == 2
        assert engine.pack_index == 0


class TestPassDirection:
    def test_left_then_right(self) -> None:
        """Round one passes left and round two passes right."""
        engine = DraftEngine(_seats(4), _packs(2, 4, 2))
        engine.start()

        before = [list(seat.hand) for seat in engine.seats]
        for seat in engine.seats:
            engine.pick(seat.seat_id, seat.hand[0].id)
        remaining = [hand[1:] for hand in before]
        for i, seat in enumerate(engine.seats):
            assert seat.hand == remaining[(i - 1) % 4]

        # Finish pack 0
        for seat in engine.seats:
            engine.pick(seat.seat_id, seat.hand[0].id)
        assert engine.pack_index == 1

        before = [list(seat.hand) for seat in engine.seats]
        for seat in engine.seats:
            engine.pick(seat.seat_id, seat.hand[0].id)
        remaining = [hand[1:] for hand in before]
        for i, seat in enumerate(engine.seats):
            assert seat.hand == remaining[(i + 1) % 4]


class TestConservation:
    def test_picks_equal_dealt_cards(self) -> None:
        """Every dealt card ends up in exactly one pool."""
        cards = make_set()
        rng = random.Random(11)
        packs = [[rng.sample(cards, 14) for _ in range(8)] for _ in range(3)]
        engine = DraftEngine(_seats(8, bots=True), packs)
        engine.start()
        engine.play_bots()

        assert engine.is_complete
        picked = Counter(card.id for seat in engine.seats for card in seat.picks)
        dealt = Counter(card.id for round_packs in packs for pack in round_packs for card in pack)
        assert picked == dealt
        assert Counter(card.id for card in engine.dealt_cards()) == dealt

    def test_every_seat_gets_one_card_per_pick(self) -> None:
        """Each pick round adds one card per seat."""
        engine = DraftEngine(_seats(3, bots=True), _packs(3, 3, 5))
        engine.start()
        engine.play_bots()
        assert all(len(seat.picks) == 15 for seat in engine.seats)


class TestUnevenPacks:
    def test_empty_round_is_skipped(self) -> None:
        """A round of empty packs is skipped."""
        packs = [
            [[make_card("a")], [make_card("b")]],
            [[], []],
            [[make_card("c")], [make_card("d")]],
        ]
        engine = DraftEngine(_seats(2, bots=True), packs)
        engine.start()
        engine.play_bots()
        assert engine.is_complete
        assert sorted(_ids(engine.seats[0].picks + engine.seats[1].picks)) == ["a", "b", "c", "d"]

    def test_short_pack_does_not_block_round(self) -> None:
        """An emptied pack does not stall the others."""
        packs = [[[make_card("a"), make_card("b")], [make_card("c")]]]
        engine = DraftEngine(_seats(2), packs)
        engine.start()

        engine.pick("s0", "a")
        engine.pick("s1", "c")

        # s0 now holds s1's empty hand and has nothing to pick
        assert engine.seats[0].hand == []
        assert engine.seats[0].has_picked is True
        assert _ids(engine.seats[1].hand) == ["b"]
        engine.pick("s1", "b")
        assert engine.is_complete


class TestSnapshot:
    def test_counts_are_one_based(self) -> None:
        """Pack and pick numbers start at 1."""
        engine = DraftEngine(_seats(2), _packs(2, 2, 3))
        engine.start()

        snapshot = engine.snapshot("s0")
        assert snapshot is not None
        assert snapshot.pack_number == 1
        assert snapshot.pick_number == 1
        assert len(snapshot.hand) == 3
        assert snapshot.waiting_for == ("Seat 0", "Seat 1")

    def test_pick_number_resets_each_pack(self) -> None:
        """Pick number restarts with each pack."""
        engine = DraftEngine(_seats(1), _packs(2, 1, 2))
        engine.start()
        engine.pick("s0", "r0s0-0")
        assert engine.snapshot("s0").pick_number == 2
        engine.pick("s0", "r0s0-1")

        snapshot = engine.snapshot("s0")
        assert snapshot.pack_number == 2
        assert snapshot.pick_number == 1

    def test_unknown_seat(self) -> None:
        """Unknown seats have no snapshot."""
        engine = DraftEngine(_seats(1), _packs(1, 1, 1))
        assert engine.snapshot("ghost") is None

    def test_complete_snapshot(self) -> None:
        engine = DraftEngine(_seats(1), _packs(1, 1, 1))
        engine.start()
        engine.pick("s0", "r0s0-0")
        snapshot = engine.snapshot("s0")
        assert snapshot.is_complete is True
        assert snapshot.hand == ()
        assert snapshot.waiting_for == ()


class TestObservers:
    def test_notified_on_deal_and_rotation(self) -> None:
        """Listeners hear every deal and pass."""
        engine = DraftEngine(_seats(2), _packs(1, 2, 2))
        calls: list[DraftPhase] = []
        engine.subscribe(lambda e: calls.append(e.phase))

        engine.start()
        engine.pick("s0", "r0s0-0")
        assert calls == [DraftPhase.AWAITING_PICKS]
        engine.pick("s1", "r0s1-0")
        assert calls == [DraftPhase.AWAITING_PICKS, DraftPhase.AWAITING_PICKS]

    def test_unsubscribe(self) -> None:
        """Disposed listeners are not called again."""
        engine = DraftEngine(_seats(1), _packs(1, 1, 2))
        calls: list[int] = []
        unsubscribe = engine.subscribe(lambda e: calls.append(1))
        unsubscribe()
        engine.start()
        assert calls == []


class TestBots:
    def test_play_bots_waits_for_humans(self) -> None:
        """Bots pick but the round waits on humans."""
        seats = [Seat(seat_id="human", name="Human"), *_seats(2, bots=True)]
        engine = DraftEngine(seats, _packs(1, 3, 3))
        engine.start()

        assert engine.play_bots() == 2
        assert engine.waiting_for() == ["Human"]
        assert engine.play_bots() == 0

    def test_auto_pick_takes_first_card(self) -> None:
        """Auto-pick takes the first card in hand."""
        engine = DraftEngine(_seats(1), _packs(1, 1, 3))
        engine.start()
        picked = engine.auto_pick("s0")
        assert picked is not None and picked.id == "r0s0-0"

    def test_final_pools(self) -> None:
        """Final pools hold every seat's picks."""
        engine = DraftEngine(_seats(2, bots=True), _packs(1, 2, 2))
        engine.start()
        engine.play_bots()
        pools = engine.final_pools()
        assert set(pools) == {"s0", "s1"}
        assert all(len(cards) == 2 for cards in pools.values())

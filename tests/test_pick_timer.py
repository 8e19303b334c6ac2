import asyncio

from boosterdraft.services.pick_timer import PickTimer


class TestPickTimer:
    async def test_fires_once_after_budget(self) -> None:
        """The callback fires once when time runs out."""
        fired: list[int] = []
        timer = PickTimer(0.01, lambda: fired.append(1))

        timer.start()
        assert timer.active
        await asyncio.sleep(0.05)

        assert fired == [1]
        assert timer.active is False

    async def test_cancel_prevents_firing(self) -> None:
        """A cancelled timer never fires."""
        fired: list[int] = []
        timer = PickTimer(0.02, lambda: fired.append(1))

        timer.start()
        timer.cancel()
        await asyncio.sleep(0.05)

        assert fired == []
        assert timer.remaining() is None

    async def test_restart_replaces_countdown(self) -> None:
        """Restarting drops the old countdown."""
        fired: list[int] = []
        timer = PickTimer(0.03, lambda: fired.append(1))

        timer.start()
        await asyncio.sleep(0.02)
        timer.restart()
        await asyncio.sleep(0.02)
        assert fired == []

        await asyncio.sleep(0.05)
        assert fired == [1]

    async def test_zero_budget_is_disabled(self) -> None:
        """A zero budget never starts."""
        fired: list[int] = []
        timer = PickTimer(0, lambda: fired.append(1))

        timer.start()
        await asyncio.sleep(0.01)

        assert timer.enabled is False
        assert timer.active is False
        assert fired == []

    async def test_remaining_counts_down(self) -> None:
        """Remaining time drops while running."""
        timer = PickTimer(10, lambda: None)
        timer.start()
        remaining = timer.remaining()
        timer.cancel()

        assert remaining is not None
        assert 0 < remaining <= 10

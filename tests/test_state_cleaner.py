"""Tests for the periodic state cleaner."""

import asyncio

from conftest import PASSWORD, FakeClock
from services.auth.session_store import SessionStore
from utils.state_cleaner import StateCleaner


class TestStateCleaner:
    def test_sweep_once_removes_expired_sessions(self, coordinator):
        clock = FakeClock(0.0)
        coordinator.sessions = SessionStore(ttl_seconds=60, clock=clock)
        coordinator.login(PASSWORD, "ip")
        clock.advance(61)

        assert StateCleaner(coordinator).sweep_once() == 1
        assert len(coordinator.sessions) == 0

    async def test_periodic_loop_stops_on_cancel(self, coordinator):
        cleaner = StateCleaner(coordinator, interval_seconds=0.01)
        task = asyncio.create_task(cleaner.run_periodic_cleanup())
        await asyncio.sleep(0.05)
        task.cancel()
        await asyncio.wait_for(task, timeout=1.0)
        assert task.done()

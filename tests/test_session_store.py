"""Tests for the viewer session store."""

import pytest

from conftest import FakeClock
from services.auth.session_store import SessionStore


class TestSessionValidation:
    """Tokens validate only while unexpired"""

    def test_unknown_tokens_never_validate(self):
        store = SessionStore()
        for token in ["", None, "nope", "a" * 43]:
            assert store.validate(token) is False

    def test_created_token_valid_until_expiry(self):
        clock = FakeClock(0.0)
        store = SessionStore(ttl_seconds=3600, clock=clock)
        token = store.create()

        clock.now = 3599.999
        assert store.validate(token) is True
        clock.now = 3600.0
        assert store.validate(token) is False

    def test_validate_does_not_renew(self):
        clock = FakeClock(0.0)
        store = SessionStore(ttl_seconds=10, clock=clock)
        token = store.create()
        expires_at = store.get(token).expires_at

        clock.now = 9.0
        assert store.validate(token)
        assert store.get(token).expires_at == expires_at

    def test_expired_entry_removed_on_validate(self):
        clock = FakeClock(0.0)
        store = SessionStore(ttl_seconds=10, clock=clock)
        token = store.create()
        clock.advance(11)

        assert store.validate(token) is False
        assert store.get(token) is None
        assert len(store) == 0

    def test_tokens_are_unique(self):
        store = SessionStore()
        tokens = {store.create() for _ in range(200)}
        assert len(tokens) == 200

    def test_revoke(self):
        store = SessionStore()
        token = store.create()
        store.revoke(token)
        store.revoke("unknown")
        assert store.validate(token) is False

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            SessionStore(ttl_seconds=0)


class TestSessionSweep:
    """Sweeping bounds memory growth"""

    def test_sweep_removes_only_expired(self):
        clock = FakeClock(0.0)
        store = SessionStore(ttl_seconds=10, clock=clock)
        old = [store.create() for _ in range(3)]
        clock.advance(5)
        fresh = store.create()
        clock.advance(6)

        assert store.sweep() == 3
        assert len(store) == 1
        assert store.validate(fresh)
        assert not any(store.validate(token) for token in old)

    def test_create_sweeps_past_threshold(self):
        clock = FakeClock(0.0)
        store = SessionStore(ttl_seconds=10, sweep_threshold=5, clock=clock)
        for _ in range(6):
            store.create()
        clock.advance(20)

        store.create()
        assert len(store) == 1

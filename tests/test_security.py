import asyncio
from unittest.mock import AsyncMock, MagicMock

from security.auth import authorized_only, is_authorized_user, verify_cron_secret
from security.rate_limiter import SlidingWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCronSecret:
    def test_accepts_matching_bearer(self):
        assert verify_cron_secret("Bearer s3cret", "s3cret")
        assert verify_cron_secret("bearer s3cret", "s3cret")

    def test_rejects_everything_else(self):
        assert not verify_cron_secret(None, "s3cret")
        assert not verify_cron_secret("Bearer wrong", "s3cret")
        assert not verify_cron_secret("s3cret", "s3cret")
        assert not verify_cron_secret("Basic s3cret", "s3cret")

    def test_unset_secret_rejects(self):
        assert not verify_cron_secret("Bearer ", "")
        assert not verify_cron_secret("Bearer anything", "")


class TestWhitelist:
    def test_empty_whitelist_allows_everyone(self):
        assert is_authorized_user(42, allowed=[])

    def test_whitelist(self):
        assert is_authorized_user(42, allowed=[42, 7])
        assert not is_authorized_user(8, allowed=[42, 7])

    def test_decorator_blocks_unknown_users(self, monkeypatch):
        monkeypatch.setattr("security.auth.is_authorized_user", lambda user_id: False)
        handler = AsyncMock()
        update = MagicMock()
        update.message.reply_text = AsyncMock()

        asyncio.run(authorized_only(handler)(update, MagicMock()))

        handler.assert_not_awaited()
        update.message.reply_text.assert_awaited_once_with("⛔ Este bot es privado.")


class TestSlidingWindowLimiter:
    def test_limits_within_window(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(max_events=2, window_seconds=60, clock=clock)

        assert limiter.allow("u")
        assert limiter.allow("u")
        assert not limiter.allow("u")
        assert limiter.allow("other")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(max_events=1, window_seconds=60, clock=clock)

        assert limiter.allow("u")
        clock.now = 61
        assert limiter.allow("u")

    def test_reset(self):
        limiter = SlidingWindowLimiter(max_events=1, window_seconds=60, clock=FakeClock())
        limiter.allow("u")
        limiter.reset()
        assert limiter.allow("u")

"""
security/rate_limiter.py
-------------------------
Sliding-window rate limiting for operator commands.
"""

import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Hashable

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)


class SlidingWindowLimiter:
    """Allows at most ``max_events`` per key within ``window_seconds``."""

    def __init__(
        self,
        max_events: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._clock = clock
        self._events: dict[Hashable, list[float]] = defaultdict(list)

    def allow(self, key: Hashable) -> bool:
        """Record an event for ``key`` if it is within the limit."""
        now = self._clock()
        cutoff = now - self.window_seconds
        recent = [t for t in self._events[key] if t > cutoff]
        if len(recent) >= self.max_events:
            self._events[key] = recent
            return False
        recent.append(now)
        self._events[key] = recent
        return True

    def reset(self) -> None:
        self._events.clear()


_limiter = SlidingWindowLimiter(RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS)


def rate_limited(func: Callable):
    """
    Decorator that enforces the per-user command limit.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max commands per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not _limiter.allow(user.id):
            logger.warning(f"⚠️ Rate limit hit for user {user.id}")
            await update.message.reply_text("⚠️ Demasiados comandos. Espera un momento e intenta de nuevo.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper

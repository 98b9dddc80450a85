"""Per-user admission control: request quota plus single-flight.

One ``ConcurrencyGuard`` is built per process and shared by every pipeline
run. All state lives in memory and is lost on restart.

Admission never awaits, so on a single event loop the check-then-mark
sequence cannot interleave with another admission for the same user.
"""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from yt2samp.errors import RateLimitedError, UserBusyError

logger = logging.getLogger(__name__)


@dataclass
class UserQuota:
    """Requests counted in the user's current window."""

    count: int
    window_start: float


class ConcurrencyGuard:
    """Rejects users who are over quota or already have a request running.

    Rate policy: at most ``max_requests`` admissions per ``window_seconds``,
    the window anchored at the first admission in it. Admissions count even
    if the pipeline later fails.

    Single-flight policy: a user with an admitted, unfinished request is
    rejected regardless of quota.
    """

    def __init__(
        self,
        max_requests: int = 2,
        window_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._quotas: dict[str, UserQuota] = {}
        self._active: set[str] = set()

    def is_busy(self, user_id: str) -> bool:
        return user_id in self._active

    def remaining_wait(self, user_id: str) -> float:
        """Seconds until the user may be admitted again by the rate policy (0 if now)."""
        quota = self._live_quota(user_id, self.clock())
        if quota is None or quota.count < self.max_requests:
            return 0.0
        return quota.window_start + self.window_seconds - self.clock()

    def admit(self, user_id: str) -> None:
        """Admit the user or raise.

        Raises:
            RateLimitedError: quota exhausted in the current window.
            UserBusyError: the user already has a request in flight.
        """
        now = self.clock()
        quota = self._live_quota(user_id, now)

        if quota is not None and quota.count >= self.max_requests:
            remaining = quota.window_start + self.window_seconds - now
            logger.info("Rate limited user %s for %.0fs", user_id, remaining)
            raise RateLimitedError(remaining)

        if user_id in self._active:
            logger.info("User %s already has a request in flight", user_id)
            raise UserBusyError()

        if quota is None:
            self._quotas[user_id] = UserQuota(count=1, window_start=now)
        else:
            quota.count += 1
        self._active.add(user_id)

    def release(self, user_id: str) -> None:
        """Clear the user's busy marker. Releasing an idle user is a no-op."""
        self._active.discard(user_id)

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """Admit for the duration of the block; release on every exit path."""
        self.admit(user_id)
        try:
            yield
        finally:
            self.release(user_id)

    def prune_expired(self) -> int:
        """Drop quota entries whose window has elapsed. Returns how many were dropped."""
        now = self.clock()
        expired = [
            user_id
            for user_id, quota in self._quotas.items()
            if now - quota.window_start >= self.window_seconds
        ]
        for user_id in expired:
            del self._quotas[user_id]
        return len(expired)

    def _live_quota(self, user_id: str, now: float) -> UserQuota | None:
        """Return the user's quota if its window is still open."""
        quota = self._quotas.get(user_id)
        if quota is None or now - quota.window_start >= self.window_seconds:
            return None
        return quota

"""Failed-login counting and time-based account lockout."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # Timestamps without an offset are stored in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class FailureOutcome:
    attempts: int
    locked_until: Optional[datetime]
    remaining_attempts: int

    @property
    def locked(self) -> bool:
        return self.locked_until is not None


@dataclass(frozen=True)
class LockoutPolicy:
    max_attempts: int = 5
    lock_duration: timedelta = timedelta(minutes=15)

    @property
    def lock_minutes(self) -> int:
        return int(self.lock_duration.total_seconds() // 60)

    def is_locked(self, locked_until: Optional[datetime], now: datetime) -> bool:
        return locked_until is not None and _aware(locked_until) > now

    def minutes_remaining(self, locked_until: datetime, now: datetime) -> int:
        seconds = (_aware(locked_until) - now).total_seconds()
        return max(math.ceil(seconds / 60), 0)

    def register_failure(
        self,
        failed_attempts: int,
        locked_until: Optional[datetime],
        now: datetime,
    ) -> FailureOutcome:
        """Count one more failed password check.

        A lock that has already run out starts a fresh count.
        """
        previous = failed_attempts or 0
        if locked_until is not None and not self.is_locked(locked_until, now):
            previous = 0
        attempts = previous + 1
        if attempts >= self.max_attempts:
            return FailureOutcome(attempts, now + self.lock_duration, 0)
        return FailureOutcome(attempts, None, self.max_attempts - attempts)

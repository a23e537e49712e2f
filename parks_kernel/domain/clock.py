"""
Injectable source of "now" for the budget service.

Budgets are stamped with a creation date when they are created or
duplicated.  The service asks a ``Clock`` instead of the system so tests can
pin the date.  Engines never take a clock: nothing they compute depends on
the current time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

DEFAULT_TEST_INSTANT = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current instant."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Starts at noon UTC on 2025-01-01 unless another instant is given; naive
    instants are taken as UTC.
    """

    def __init__(self, instant: datetime | None = None):
        self._instant = self._aware(instant or DEFAULT_TEST_INSTANT)

    @staticmethod
    def _aware(instant: datetime) -> datetime:
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        return instant

    def now(self) -> datetime:
        return self._instant

    def set_time(self, instant: datetime) -> None:
        self._instant = self._aware(instant)

    def advance(self, *, days: int = 0, seconds: int = 0) -> None:
        self._instant += timedelta(days=days, seconds=seconds)

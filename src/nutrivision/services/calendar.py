"""Local calendar used for every day boundary in the app."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class LocalCalendar:
    """Single definition of "today" shared by stats, streaks and the water log.

    With no zone set, the host's local time rules apply to each instant
    separately, so daylight saving transitions move the day boundary.
    """

    tz: tzinfo | None = None

    @classmethod
    def create(cls, timezone_name: str | None = None) -> "LocalCalendar":
        """Create a calendar for an IANA zone, or the host zone when unset."""
        if timezone_name:
            return cls(tz=ZoneInfo(timezone_name))
        return cls()

    def now(self) -> datetime:
        """Return the current local time."""
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(tz=self.tz)

    def now_ms(self) -> int:
        """Return the current time as epoch milliseconds."""
        return int(self.now().timestamp() * 1000)

    def today(self) -> date:
        """Return the current local date."""
        return self.now().date()

    def local_time(self, timestamp_ms: int) -> datetime:
        """Return the aware local time of an epoch-millisecond timestamp."""
        moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=self.tz)
        if self.tz is None:
            return moment.astimezone()
        return moment

    def day_of(self, timestamp_ms: int) -> date:
        """Return the local date an epoch-millisecond timestamp falls on."""
        return self.local_time(timestamp_ms).date()

    def day_key(self, day: date | None = None) -> str:
        """Return the storage key for a day (defaults to today)."""
        return (day or self.today()).isoformat()

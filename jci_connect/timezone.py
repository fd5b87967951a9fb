"""
App-timezone date/time conversion.

Every civil date and time in the dashboard is interpreted in one fixed IANA
zone (the app timezone), never the timezone of the process serving the page,
so every viewer sees the same calendar placement.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

from jci_connect.config import DEFAULT_TIMEZONE

_DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?$")


def parse_date_key(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` date-key. Raises ValueError on anything else."""
    if not isinstance(value, str) or not _DATE_KEY_PATTERN.match(value):
        raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD")
    return date.fromisoformat(value)


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:mm`` (seconds tolerated and dropped). Raises ValueError."""
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time '{value}': expected HH:mm")
    return time(int(match.group(1)), int(match.group(2)))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AppClock:
    """Time source bound to the app timezone.

    ``now_fn`` supplies the current instant and is injectable so callers can
    pin "now" (naive results are taken as UTC).
    """

    def __init__(
        self,
        timezone_name: str = DEFAULT_TIMEZONE,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self.timezone_name = timezone_name
        self.tz = ZoneInfo(timezone_name)
        self._now_fn = now_fn or _utc_now

    def current_instant(self) -> datetime:
        instant = self._now_fn()
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.tz)

    def today(self) -> str:
        """Current calendar date in the app timezone as a date-key."""
        return self.current_instant().date().isoformat()

    def today_date(self) -> date:
        return self.current_instant().date()

    def now(self) -> tuple[int, int]:
        """Current wall-clock (hour, minute) in the app timezone."""
        current = self.current_instant()
        return current.hour, current.minute

    def to_instant(self, date_key: str, time_of_day: str) -> datetime:
        """Combine a civil date and time in the app timezone into an aware instant."""
        return datetime.combine(
            parse_date_key(date_key), parse_time_of_day(time_of_day), tzinfo=self.tz
        )

    def date_key(self, civil: Union[date, datetime]) -> str:
        """Format a civil date (or an instant, converted first) as ``YYYY-MM-DD``."""
        if isinstance(civil, datetime):
            if civil.tzinfo is not None:
                civil = civil.astimezone(self.tz)
            return civil.date().isoformat()
        return civil.isoformat()

    def utc_to_app(self, utc_iso: str) -> tuple[str, str]:
        """Convert a UTC timestamp (e.g. from Zoom) to app-timezone (date, HH:mm).

        Timestamps without an offset are UTC.
        """
        value = (utc_iso or "").strip()
        if not value:
            raise ValueError("Empty timestamp")
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        local = dt.astimezone(self.tz)
        return local.date().isoformat(), local.strftime("%H:%M")

    def app_to_utc_iso(self, date_key: str, time_of_day: str) -> str:
        """Civil app-timezone date/time as a UTC ISO string ending in ``Z``."""
        instant = self.to_instant(date_key, time_of_day).astimezone(timezone.utc)
        return instant.strftime("%Y-%m-%dT%H:%M:%SZ")

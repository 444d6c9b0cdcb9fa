"""Time window resolution - which hours of market data to look at.

The window is ``[now + offset, now)`` in the market's reference time zone,
reduced to calendar dates and hours of day because that is the granularity
the market data service is queried in.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class TimeZoneError(RuntimeError):
    """Raised when the reference time zone cannot be resolved."""


@dataclass(frozen=True)
class TimeWindow:
    """A lookback window expressed in market query terms."""

    start_date: date
    end_date: date
    start_hour: int  # 0-23
    end_hour: int  # 0-23

    @property
    def spans_two_days(self) -> bool:
        """``True`` when the window crosses midnight."""
        return self.start_date != self.end_date

    @property
    def start_date_str(self) -> str:
        return self.start_date.isoformat()

    @property
    def end_date_str(self) -> str:
        return self.end_date.isoformat()


def load_zone(tz_name: str) -> ZoneInfo:
    """Return the ``ZoneInfo`` for *tz_name* or raise ``TimeZoneError``."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise TimeZoneError(f"Error getting location {tz_name!r}: {exc}") from exc


def resolve_time_window(
    offset: timedelta,
    tz_name: str,
    now: datetime | None = None,
) -> TimeWindow:
    """Compute the window ending at *now* and starting *offset* earlier.

    Args:
        offset: Signed lookback, normally negative (e.g. ``-3h``).
        tz_name: IANA zone the market quotes hours in.
        now: Reference instant.  Aware values are converted into the zone,
             naive values are taken as already local.  Defaults to the
             current time.

    Raises:
        TimeZoneError: If *tz_name* is unknown.
    """
    zone = load_zone(tz_name)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=zone)
    else:
        now = now.astimezone(zone)

    # Arithmetic in UTC so DST transitions shift the wall clock correctly.
    before = (now.astimezone(timezone.utc) + offset).astimezone(zone)

    return TimeWindow(
        start_date=before.date(),
        end_date=now.date(),
        start_hour=before.hour,
        end_hour=now.hour,
    )

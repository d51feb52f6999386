"""Request window arithmetic for the ENTSO-E day-ahead API."""
from __future__ import annotations

from datetime import datetime, timedelta

from homeassistant.util import dt as dt_util

from .const import WINDOW_HOURS, WIRE_TIMESTAMP_FORMAT
from .models import PriceWindow


def _to_utc(instant: datetime) -> datetime:
    """Return ``instant`` in UTC; naive values are taken as UTC already."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=dt_util.UTC)
    return dt_util.as_utc(instant)


def format_wire_timestamp(instant: datetime) -> str:
    """Render ``instant`` as ``YYYYMMDDHHmm`` in UTC.

    Seconds and microseconds are dropped, never rounded.
    """
    return _to_utc(instant).strftime(WIRE_TIMESTAMP_FORMAT)


def compute_window(now: datetime) -> PriceWindow:
    """Return the window covering today and tomorrow (UTC)."""
    start = _to_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return PriceWindow(start=start, end=start + timedelta(hours=WINDOW_HOURS))

"""Select the price slot that applies to the current instant."""
from __future__ import annotations

from bisect import bisect_right
from datetime import datetime
from typing import Sequence

from homeassistant.util import dt as dt_util

from .const import PRICE_DIVISOR
from .models import CurrentPriceResult, TimeSlot


def to_display_price(source_price: float) -> float:
    """Convert EUR/MWh to ct/kWh."""
    return source_price / PRICE_DIVISOR


def fallback_result(now: datetime, fallback_price: float) -> CurrentPriceResult:
    """Result published when no live price is available."""
    return CurrentPriceResult(price=fallback_price, effective_since=now, no_data=True)


def resolve_current(
    slots: Sequence[TimeSlot],
    now: datetime,
    fallback_price: float,
) -> CurrentPriceResult:
    """Return the price of the slot containing ``now``.

    ``slots`` must be sorted by start. The last slot is treated as open
    ended. With no slots, or when ``now`` precedes the first one, the
    fallback price is returned with ``no_data`` set.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt_util.UTC)

    index = bisect_right([slot.start for slot in slots], now) - 1
    if index < 0:
        return fallback_result(now, fallback_price)

    slot = slots[index]
    return CurrentPriceResult(
        price=to_display_price(slot.price),
        effective_since=slot.start,
        slot=slot,
    )

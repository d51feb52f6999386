"""Data model for EPEX Monitor price resolution."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class TimeSlot:
    """Price valid from ``start`` until the next slot's start.

    ``price`` is in the source unit (EUR/MWh).
    """

    start: datetime
    price: float


@dataclass(frozen=True)
class PriceWindow:
    """Half-open ``[start, end)`` interval requested from ENTSO-E."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Window start {self.start} is not before end {self.end}")


@dataclass(frozen=True)
class CurrentPriceResult:
    """Price resolved for "now".

    ``price`` is the display value in ct/kWh. When ``no_data`` is set it holds
    the configured fallback and ``slot`` is None.
    """

    price: float
    effective_since: datetime
    slot: TimeSlot | None = None
    no_data: bool = False

    @property
    def source_price(self) -> float | None:
        """Raw slot price in EUR/MWh."""
        return self.slot.price if self.slot is not None else None


class PriceSink(Protocol):
    """Anything that can display the current price."""

    def publish(self, price: float | None) -> None:
        """Show ``price`` (ct/kWh); None means no value could be resolved."""

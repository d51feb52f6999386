"""DataUpdateCoordinator for EPEX Monitor integration."""
from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from typing import Any

import aiohttp

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

from .api import EntsoeApiClient, EntsoeError
from .const import (
    CONF_API_KEY,
    CONF_DOCUMENT_TYPE,
    CONF_IN_DOMAIN,
    CONF_MAX_PRICE,
    CONF_MAX_RATE,
    CONF_OUT_DOMAIN,
    CONF_REFRESH_INTERVAL,
    DEFAULT_BIDDING_ZONE,
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_MAX_RATE,
    DEFAULT_REFRESH_INTERVAL,
    MIN_REFRESH_INTERVAL,
    PRICE_UNIT,
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_LIVE,
)
from .models import CurrentPriceResult, PriceWindow, TimeSlot
from .parser import parse_document
from .resolver import fallback_result, resolve_current
from .window import compute_window

_LOGGER = logging.getLogger(__name__)


def refresh_minutes(value: Any) -> int:
    """Configured refresh interval in minutes, never below the minimum."""
    try:
        minutes = int(float(value))
    except (TypeError, ValueError):
        minutes = DEFAULT_REFRESH_INTERVAL
    return max(minutes, MIN_REFRESH_INTERVAL)


class EPEXCoordinator(DataUpdateCoordinator):
    """DataUpdateCoordinator polling ENTSO-E for the current day-ahead price."""

    def __init__(self, hass: HomeAssistant, config_entry) -> None:
        """Initialize the coordinator.

        Args:
            hass: Home Assistant instance
            config_entry: ConfigEntry with user configuration
        """
        current = {**config_entry.data, **config_entry.options}
        super().__init__(
            hass,
            _LOGGER,
            name="EPEX Price",
            update_interval=timedelta(
                minutes=refresh_minutes(current.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL))
            ),
        )

        self.config_entry = config_entry

        # Shared aiohttp session for all API calls
        self.session = aiohttp.ClientSession()

        self._client = EntsoeApiClient(
            self.session,
            self._get_config(CONF_API_KEY, ""),
            document_type=self._get_config(CONF_DOCUMENT_TYPE, DEFAULT_DOCUMENT_TYPE),
            in_domain=self._get_config(CONF_IN_DOMAIN, DEFAULT_BIDDING_ZONE),
            out_domain=self._get_config(CONF_OUT_DOMAIN, DEFAULT_BIDDING_ZONE),
        )

        # At most one poll in flight; the refresh service can race the timer
        self._poll_lock = asyncio.Lock()

        # Log unavailability once per outage
        self._last_available = True

    def _get_config(self, key: str, default: Any = None) -> Any:
        """Read a config value, options taking precedence over data."""
        return self.config_entry.options.get(key, self.config_entry.data.get(key, default))

    @property
    def client(self) -> EntsoeApiClient:
        return self._client

    @property
    def fallback_price(self) -> float:
        try:
            return float(self._get_config(CONF_MAX_RATE, self._get_config(CONF_MAX_PRICE, DEFAULT_MAX_RATE)))
        except (TypeError, ValueError):
            return DEFAULT_MAX_RATE

    @property
    def current_result(self) -> CurrentPriceResult | None:
        """Last resolved price, or None before the first poll."""
        if not self.data:
            return None
        return self.data.get("result")

    @property
    def current_price(self) -> float | None:
        result = self.current_result
        return result.price if result is not None else None

    def _build_data(
        self,
        result: CurrentPriceResult,
        status: str,
        slots: list[TimeSlot] | None = None,
        window: PriceWindow | None = None,
        error: str | None = None,
    ) -> dict[str, Any]:
        return {
            "result": result,
            "status": status,
            "slots": slots or [],
            "window": window,
            "error": error,
            "last_update": dt_util.now().isoformat(),
            "last_success": status == STATUS_LIVE,
        }

    async def _async_update_data(self) -> dict[str, Any]:
        """Run one poll cycle.

        Never raises: every failure degrades to the previous data, or to the
        configured fallback price when there is none yet.
        """
        if self._poll_lock.locked():
            _LOGGER.debug("Previous ENTSO-E poll still running, skipping this one")
            if self.data:
                return self.data
            return self._build_data(fallback_result(dt_util.utcnow(), self.fallback_price), STATUS_FALLBACK)

        async with self._poll_lock:
            return await self._poll()

    async def _poll(self) -> dict[str, Any]:
        now = dt_util.utcnow()
        fallback = self.fallback_price

        # Step 1: No API key means no request at all
        if not self._client.has_api_key:
            _LOGGER.warning("ENTSO-E API key is missing. Publishing fallback price %s", fallback)
            return self._build_data(fallback_result(now, fallback), STATUS_FALLBACK)

        # Step 2: Fetch today + tomorrow
        window = compute_window(now)
        try:
            raw = await self._client.fetch_document(window)
        except EntsoeError as err:
            if self._last_available:
                _LOGGER.error("ENTSO-E API is unavailable: %s", err)
                self._last_available = False
            else:
                _LOGGER.debug("ENTSO-E API still unavailable: %s", err)

            # Keep publishing the last price we have
            if self.data:
                return {
                    **self.data,
                    "status": STATUS_FAILED,
                    "error": str(err),
                    "last_update": dt_util.now().isoformat(),
                    "last_success": False,
                }
            return self._build_data(
                fallback_result(now, fallback), STATUS_FAILED, window=window, error=str(err)
            )

        if not self._last_available:
            _LOGGER.info("ENTSO-E API connection restored")
            self._last_available = True

        # Step 3: Parse and pick the slot for now
        slots = parse_document(raw)
        result = resolve_current(slots, now, fallback)

        if result.no_data:
            _LOGGER.warning("No ENTSO-E price covers %s, publishing fallback price %s", now.isoformat(), fallback)
            return self._build_data(result, STATUS_FALLBACK, slots, window)

        _LOGGER.info("Fetched price: %s %s", result.price, PRICE_UNIT)
        return self._build_data(result, STATUS_LIVE, slots, window)

    async def async_shutdown(self) -> None:
        """Clean up coordinator resources."""
        await super().async_shutdown()
        await self.session.close()

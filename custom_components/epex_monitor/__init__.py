"""The EPEX Monitor integration."""
from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError

from .const import DOMAIN, SERVICE_REFRESH_PRICE
from .coordinator import EPEXCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["sensor"]

type EpexMonitorConfigEntry = ConfigEntry[EPEXCoordinator]


async def async_setup_entry(hass: HomeAssistant, entry: EpexMonitorConfigEntry) -> bool:
    """Set up EPEX Monitor from a config entry."""
    coordinator = EPEXCoordinator(hass, entry)

    # Initial fetch; never fails, a missing key or outage yields the fallback price
    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    _register_services(hass)

    return True


async def _async_update_listener(hass: HomeAssistant, entry: EpexMonitorConfigEntry) -> None:
    """Reload the integration when options change."""
    await hass.config_entries.async_reload(entry.entry_id)


def _register_services(hass: HomeAssistant) -> None:
    """Register EPEX Monitor services (idempotent)."""

    def _get_coordinators() -> list[EPEXCoordinator]:
        return [
            entry.runtime_data
            for entry in hass.config_entries.async_entries(DOMAIN)
            if getattr(entry, "runtime_data", None) is not None
        ]

    async def handle_refresh_price(call: ServiceCall) -> None:
        """Poll ENTSO-E now instead of waiting for the next interval."""
        coordinators = _get_coordinators()
        if not coordinators:
            raise HomeAssistantError("No EPEX Monitor instances configured")
        for coordinator in coordinators:
            _LOGGER.info("Manual price refresh triggered via service call")
            await coordinator.async_request_refresh()

    if not hass.services.has_service(DOMAIN, SERVICE_REFRESH_PRICE):
        hass.services.async_register(
            DOMAIN,
            SERVICE_REFRESH_PRICE,
            handle_refresh_price,
            schema=vol.Schema({}),
        )


async def async_unload_entry(hass: HomeAssistant, entry: EpexMonitorConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator: EPEXCoordinator = entry.runtime_data
        await coordinator.async_shutdown()

        remaining = [
            e for e in hass.config_entries.async_entries(DOMAIN)
            if e.entry_id != entry.entry_id
        ]
        if not remaining:
            hass.services.async_remove(DOMAIN, SERVICE_REFRESH_PRICE)

    return unload_ok

"""Diagnostics support for EPEX Monitor integration."""
from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_API_KEY
from .coordinator import EPEXCoordinator

TO_REDACT = {CONF_API_KEY}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: EPEXCoordinator = entry.runtime_data

    diag: dict[str, Any] = {
        "config_entry": {
            "data": async_redact_data(dict(entry.data), TO_REDACT),
            "options": async_redact_data(dict(entry.options), TO_REDACT),
        },
        "coordinator": {
            "last_update_success": coordinator.last_update_success,
            "update_interval_seconds": coordinator.update_interval.total_seconds()
            if coordinator.update_interval
            else None,
            "has_api_key": coordinator.client.has_api_key,
        },
    }

    data = coordinator.data
    if not data:
        diag["last_poll"] = None
        return diag

    result = data.get("result")
    window = data.get("window")
    diag["last_poll"] = {
        "status": data.get("status"),
        "last_update": data.get("last_update"),
        "error": data.get("error"),
        "slot_count": len(data.get("slots", [])),
        "window": {"start": window.start.isoformat(), "end": window.end.isoformat()} if window else None,
        "price": result.price if result else None,
        "source_price": result.source_price if result else None,
        "effective_since": result.effective_since.isoformat() if result else None,
        "no_data": result.no_data if result else None,
    }
    return diag

"""Sensor platform for EPEX Monitor integration."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .const import (
    CHEAPEST_SLOT_COUNT,
    CONF_IN_DOMAIN,
    DEFAULT_BIDDING_ZONE,
    DOMAIN,
    PRICE_UNIT,
    STATUS_FAILED,
)
from .coordinator import EPEXCoordinator
from .resolver import to_display_price

_LOGGER = logging.getLogger(__name__)

PARALLEL_UPDATES = 0


def _device_info(coordinator: EPEXCoordinator) -> dict[str, Any]:
    zone = coordinator.config_entry.data.get(CONF_IN_DOMAIN, DEFAULT_BIDDING_ZONE)
    return {
        "identifiers": {(DOMAIN, coordinator.config_entry.entry_id)},
        "name": f"EPEX Price Monitor {zone}",
        "manufacturer": "ENTSO-E",
    }


def _price_list(data: dict) -> list[dict[str, Any]]:
    """All slots of the fetched window in ct/kWh."""
    return [
        {"start": slot.start.isoformat(), "price": round(to_display_price(slot.price), 4)}
        for slot in data.get("slots", [])
    ]


def _cheapest_upcoming(data: dict, now=None) -> list[dict[str, Any]]:
    """Cheapest slots from the current one onwards."""
    slots = data.get("slots", [])
    if not slots:
        return []
    now = now or dt_util.utcnow()
    result = data.get("result")
    since = result.slot.start if result is not None and result.slot is not None else now
    upcoming = [slot for slot in slots if slot.start >= since]
    upcoming.sort(key=lambda slot: slot.price)
    return [
        {"start": slot.start.isoformat(), "price": round(to_display_price(slot.price), 4)}
        for slot in upcoming[:CHEAPEST_SLOT_COUNT]
    ]


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up EPEX Monitor sensors from a config entry."""
    coordinator: EPEXCoordinator = config_entry.runtime_data
    async_add_entities([EPEXPriceSensor(coordinator), EPEXPriceStatusSensor(coordinator)])


class EPEXPriceSensor(CoordinatorEntity, SensorEntity):
    """Current day-ahead price in ct/kWh.

    Acts as the price sink: the coordinator result is pushed through
    ``publish`` after every poll.
    """

    _attr_has_entity_name = True
    _attr_translation_key = "current_price"
    _attr_icon = "mdi:currency-eur"
    _attr_native_unit_of_measurement = PRICE_UNIT
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_suggested_display_precision = 2

    def __init__(self, coordinator: EPEXCoordinator) -> None:
        super().__init__(coordinator)
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_current_price"
        self._attr_device_info = _device_info(coordinator)
        self._attr_native_value = coordinator.current_price

    def publish(self, price: float | None) -> None:
        """Take ``price`` as the new state; None keeps the previous one."""
        if price is None:
            _LOGGER.warning("No current price available to update %s", self.entity_id or self.unique_id)
            return
        self._attr_native_value = price

    @callback
    def _handle_coordinator_update(self) -> None:
        self.publish(self.coordinator.current_price)
        super()._handle_coordinator_update()

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        result = self.coordinator.current_result
        if result is None:
            return None
        return {
            "effective_since": result.effective_since.isoformat(),
            "source_price": result.source_price,
            "no_data": result.no_data,
            "prices": _price_list(self.coordinator.data),
            "cheapest_slots": _cheapest_upcoming(self.coordinator.data),
        }


class EPEXPriceStatusSensor(CoordinatorEntity, SensorEntity):
    """Sensor showing where the published price came from."""

    def __init__(self, coordinator: EPEXCoordinator) -> None:
        super().__init__(coordinator)
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_price_status"
        self._attr_has_entity_name = True
        self._attr_translation_key = "price_status"
        self._attr_icon = "mdi:transmission-tower"
        self._attr_device_info = _device_info(coordinator)

    @property
    def native_value(self) -> str:
        if self.coordinator.data:
            return self.coordinator.data.get("status", "unknown")
        if self.coordinator.last_update_success is False:
            return STATUS_FAILED
        return "unknown"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        window = data.get("window")
        return {
            "last_update": data.get("last_update"),
            "slot_count": len(data.get("slots", [])),
            "window_start": window.start.isoformat() if window else None,
            "window_end": window.end.isoformat() if window else None,
            "update_interval_minutes": self.coordinator.update_interval.total_seconds() / 60
            if self.coordinator.update_interval
            else None,
            "error": data.get("error"),
        }

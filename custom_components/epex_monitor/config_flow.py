"""Config flow for EPEX Monitor integration."""
from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.helpers import selector
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.util import dt as dt_util

from .api import (
    EntsoeApiClient,
    EntsoeApiError,
    EntsoeAuthError,
    EntsoeConnectionError,
)
from .const import (
    CONF_API_KEY,
    CONF_DOCUMENT_TYPE,
    CONF_IN_DOMAIN,
    CONF_MAX_RATE,
    CONF_OUT_DOMAIN,
    CONF_REFRESH_INTERVAL,
    DEFAULT_BIDDING_ZONE,
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_MAX_RATE,
    DEFAULT_REFRESH_INTERVAL,
    DOMAIN,
    MIN_REFRESH_INTERVAL,
    PRICE_UNIT,
)
from .window import compute_window

_LOGGER = logging.getLogger(__name__)


def _refresh_interval_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=MIN_REFRESH_INTERVAL, max=1440, step=1,
            unit_of_measurement="min",
            mode=selector.NumberSelectorMode.BOX,
        )
    )


def _max_rate_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=-1000, max=1000, step=0.01,
            unit_of_measurement=PRICE_UNIT,
            mode=selector.NumberSelectorMode.BOX,
        )
    )


def _api_key_selector() -> selector.TextSelector:
    return selector.TextSelector(
        selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
    )


async def _validate_api_key(hass, data: dict[str, Any]) -> str | None:
    """Try one request with the given settings. Returns an error key or None."""
    client = EntsoeApiClient(
        async_get_clientsession(hass),
        data[CONF_API_KEY],
        document_type=data.get(CONF_DOCUMENT_TYPE, DEFAULT_DOCUMENT_TYPE),
        in_domain=data.get(CONF_IN_DOMAIN, DEFAULT_BIDDING_ZONE),
        out_domain=data.get(CONF_OUT_DOMAIN, DEFAULT_BIDDING_ZONE),
    )
    try:
        await client.fetch_document(compute_window(dt_util.utcnow()))
    except EntsoeAuthError:
        return "invalid_auth"
    except EntsoeConnectionError:
        return "cannot_connect"
    except EntsoeApiError as err:
        _LOGGER.debug("ENTSO-E validation request failed: %s", err)
        return "invalid_response"
    return None


# ---------------------------------------------------------------------------
# Options Flow
# ---------------------------------------------------------------------------

class EPEXMonitorOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for EPEX Monitor (runtime config changes)."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.FlowResult:
        """Change API key, refresh interval and fallback price."""
        errors: dict[str, str] = {}
        current = {**self.config_entry.data, **self.config_entry.options}

        if user_input is not None:
            user_input[CONF_API_KEY] = user_input.get(CONF_API_KEY, "").strip()
            user_input[CONF_REFRESH_INTERVAL] = int(user_input[CONF_REFRESH_INTERVAL])
            if user_input[CONF_API_KEY] and user_input[CONF_API_KEY] != current.get(CONF_API_KEY):
                error = await _validate_api_key(self.hass, {**current, **user_input})
                if error:
                    errors["base"] = error
            if not errors:
                return self.async_create_entry(title="", data={**self.config_entry.options, **user_input})

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_API_KEY, default=current.get(CONF_API_KEY, "")): _api_key_selector(),
                    vol.Required(
                        CONF_REFRESH_INTERVAL,
                        default=current.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL),
                    ): _refresh_interval_selector(),
                    vol.Required(
                        CONF_MAX_RATE,
                        default=current.get(CONF_MAX_RATE, DEFAULT_MAX_RATE),
                    ): _max_rate_selector(),
                }
            ),
            errors=errors,
        )


class EPEXMonitorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for EPEX Monitor."""

    VERSION = 1

    @staticmethod
    def async_get_options_flow(config_entry):
        return EPEXMonitorOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.FlowResult:
        """Handle the initial step - API key and bidding zone."""
        errors: dict[str, str] = {}

        if user_input is not None:
            data = {**user_input}
            data[CONF_API_KEY] = data.get(CONF_API_KEY, "").strip()
            data[CONF_IN_DOMAIN] = data[CONF_IN_DOMAIN].strip()
            data[CONF_OUT_DOMAIN] = data[CONF_OUT_DOMAIN].strip()
            data[CONF_REFRESH_INTERVAL] = int(data[CONF_REFRESH_INTERVAL])

            # One entry per bidding zone pair
            await self.async_set_unique_id(f"{DOMAIN}_{data[CONF_IN_DOMAIN]}_{data[CONF_OUT_DOMAIN]}")
            self._abort_if_unique_id_configured()

            # Without a key the integration runs on the fallback price
            if data[CONF_API_KEY]:
                error = await _validate_api_key(self.hass, data)
                if error:
                    errors["base"] = error
            else:
                _LOGGER.warning("No ENTSO-E API key given, the fallback price will be published")

            if not errors:
                return self.async_create_entry(title=f"EPEX {data[CONF_IN_DOMAIN]}", data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_API_KEY, default=""): _api_key_selector(),
                    vol.Required(CONF_IN_DOMAIN, default=DEFAULT_BIDDING_ZONE): str,
                    vol.Required(CONF_OUT_DOMAIN, default=DEFAULT_BIDDING_ZONE): str,
                    vol.Required(CONF_DOCUMENT_TYPE, default=DEFAULT_DOCUMENT_TYPE): str,
                    vol.Required(CONF_REFRESH_INTERVAL, default=DEFAULT_REFRESH_INTERVAL): _refresh_interval_selector(),
                    vol.Required(CONF_MAX_RATE, default=DEFAULT_MAX_RATE): _max_rate_selector(),
                }
            ),
            errors=errors,
        )

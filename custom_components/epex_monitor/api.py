"""API client for the ENTSO-E Transparency Platform."""
from __future__ import annotations

import asyncio
import logging
from typing import Any
import xml.etree.ElementTree as ET

import aiohttp

from .const import (
    API_KEY_HEADER,
    API_TIMEOUT,
    DEFAULT_BIDDING_ZONE,
    DEFAULT_DOCUMENT_TYPE,
    ENTSOE_API_URL,
)
from .models import PriceWindow
from .parser import xml_to_tree
from .window import format_wire_timestamp

_LOGGER = logging.getLogger(__name__)


class EntsoeError(Exception):
    """Base error for ENTSO-E requests."""


class EntsoeConnectionError(EntsoeError):
    """Error connecting to the ENTSO-E API."""


class EntsoeApiError(EntsoeError):
    """ENTSO-E answered with an error status or an unreadable body."""


class EntsoeAuthError(EntsoeApiError):
    """ENTSO-E rejected the API key."""


class EntsoeApiClient:
    """Async client for ENTSO-E day-ahead price documents."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        in_domain: str = DEFAULT_BIDDING_ZONE,
        out_domain: str = DEFAULT_BIDDING_ZONE,
        base_url: str = ENTSOE_API_URL,
    ) -> None:
        """Initialize the ENTSO-E API client.

        Args:
            session: aiohttp ClientSession for making requests
            api_key: ENTSO-E security token, sent as a request header
            document_type: ENTSO-E document type (A44 = day-ahead prices)
            in_domain: Bidding zone EIC code
            out_domain: Bidding zone EIC code
            base_url: API endpoint
        """
        self.session = session
        self.api_key = (api_key or "").strip()
        self.document_type = document_type or DEFAULT_DOCUMENT_TYPE
        self.in_domain = in_domain or DEFAULT_BIDDING_ZONE
        self.out_domain = out_domain or DEFAULT_BIDDING_ZONE
        self.base_url = base_url

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def build_params(self, window: PriceWindow) -> dict[str, str]:
        """Query parameters for ``window``. The API key is not included."""
        return {
            "documentType": self.document_type,
            "in_Domain": self.in_domain,
            "out_Domain": self.out_domain,
            "periodStart": format_wire_timestamp(window.start),
            "periodEnd": format_wire_timestamp(window.end),
        }

    async def fetch_document(self, window: PriceWindow) -> dict[str, Any]:
        """Fetch the price document for ``window``.

        Returns:
            Document tree as produced by ``xml_to_tree``

        Raises:
            EntsoeAuthError: If the API key is rejected
            EntsoeApiError: On any other non-200 status or malformed XML
            EntsoeConnectionError: If the API is unreachable or times out
        """
        params = self.build_params(window)
        headers = {API_KEY_HEADER: self.api_key}

        try:
            timeout = aiohttp.ClientTimeout(total=API_TIMEOUT)

            _LOGGER.debug("Fetching ENTSO-E prices %s - %s", params["periodStart"], params["periodEnd"])

            async with self.session.get(
                self.base_url,
                params=params,
                headers=headers,
                timeout=timeout,
            ) as resp:
                body = await resp.text()
                if resp.status in (401, 403):
                    raise EntsoeAuthError(f"ENTSO-E rejected the API key (status {resp.status})")
                if resp.status != 200:
                    raise EntsoeApiError(f"ENTSO-E returned status {resp.status}")

        except aiohttp.ClientError as err:
            raise EntsoeConnectionError(f"Connection error: {err}") from err
        except asyncio.TimeoutError as err:
            raise EntsoeConnectionError("Request timeout") from err

        try:
            return xml_to_tree(body)
        except ET.ParseError as err:
            raise EntsoeApiError(f"Malformed ENTSO-E response: {err}") from err

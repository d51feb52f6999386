"""Fixtures for EPEX Monitor tests."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from custom_components.epex_monitor.models import CurrentPriceResult, PriceWindow, TimeSlot

SAMPLE_XML = """<?xml version="1.0" encoding="utf-8"?>
<Publication_MarketDocument xmlns="urn:iec62325.351:tc57wg16:451-3:publicationdocument:7:3">
  <mRID>9b2b1d0f0e2c4a0c</mRID>
  <type>A44</type>
  <TimeSeries>
    <mRID>1</mRID>
    <currency_Unit.name>EUR</currency_Unit.name>
    <price_Measure_Unit.name>MWH</price_Measure_Unit.name>
    <Period>
      <timeInterval>
        <start>2025-01-06T00:00Z</start>
        <end>2025-01-06T02:00Z</end>
      </timeInterval>
      <Point>
        <position>1</position>
        <price.amount>50.0</price.amount>
      </Point>
      <Point>
        <position>2</position>
        <price.amount>45.5</price.amount>
      </Point>
    </Period>
  </TimeSeries>
</Publication_MarketDocument>
"""

ACKNOWLEDGEMENT_XML = """<?xml version="1.0" encoding="utf-8"?>
<Acknowledgement_MarketDocument xmlns="urn:iec62325.351:tc57wg16:451-1:acknowledgementdocument:7:0">
  <mRID>c7a5d8b0</mRID>
  <Reason>
    <code>999</code>
    <text>No matching data found for Data item Day-ahead Prices [12.1.D]</text>
  </Reason>
</Acknowledgement_MarketDocument>
"""

MOCK_CONFIG_DATA = {
    "api_key": "test-api-key",
    "in_domain": "10YNL----------L",
    "out_domain": "10YNL----------L",
    "document_type": "A44",
    "refresh_interval": 15,
    "max_rate": 100.0,
}

UTC = timezone.utc


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations for all tests."""
    yield


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_XML


@pytest.fixture
def acknowledgement_xml() -> str:
    return ACKNOWLEDGEMENT_XML


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock()
    entry.data = MOCK_CONFIG_DATA.copy()
    entry.options = {}
    entry.entry_id = "test_entry_id"
    return entry


@pytest.fixture
def sample_slots() -> list[TimeSlot]:
    start = datetime(2025, 1, 6, 0, 0, tzinfo=UTC)
    return [
        TimeSlot(start=start, price=50.0),
        TimeSlot(start=start + timedelta(hours=1), price=45.5),
        TimeSlot(start=start + timedelta(hours=2), price=80.0),
        TimeSlot(start=start + timedelta(hours=3), price=-5.0),
    ]


@pytest.fixture
def mock_coordinator(mock_config_entry, sample_slots):
    """Create a mock coordinator holding a resolved live price."""
    coordinator = MagicMock()
    coordinator.config_entry = mock_config_entry
    result = CurrentPriceResult(
        price=4.55,
        effective_since=sample_slots[1].start,
        slot=sample_slots[1],
    )
    start = sample_slots[0].start
    coordinator.data = {
        "result": result,
        "status": "live",
        "slots": sample_slots,
        "window": PriceWindow(start=start, end=start + timedelta(hours=48)),
        "error": None,
        "last_update": "2025-01-06T01:30:00+00:00",
        "last_success": True,
    }
    coordinator.current_result = result
    coordinator.current_price = result.price
    coordinator.last_update_success = True
    coordinator.update_interval = timedelta(minutes=15)
    return coordinator

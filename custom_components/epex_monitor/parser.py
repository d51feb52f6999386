"""Parse ENTSO-E publication documents into price slots."""
from __future__ import annotations

from datetime import datetime, timedelta
import logging
import math
from operator import attrgetter
from typing import Any, TypeVar
import xml.etree.ElementTree as ET

from homeassistant.util import dt as dt_util

from .const import DEFAULT_RESOLUTION_MINUTES, RESOLUTION_MINUTES
from .models import TimeSlot

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

PUBLICATION_DOCUMENT = "Publication_MarketDocument"
ACKNOWLEDGEMENT_DOCUMENT = "Acknowledgement_MarketDocument"


def as_list(value: T | list[T] | None) -> list[T]:
    """Return ``value`` as a list.

    The document tree keeps a single child as a bare object and repeated
    children as a list; missing children are None.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_node(element: ET.Element) -> dict[str, Any] | str:
    children = list(element)
    if not children:
        return (element.text or "").strip()

    node: dict[str, Any] = {}
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_node(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]
    return node


def xml_to_tree(text: str | bytes) -> dict[str, Any]:
    """Convert an XML document into a tree of dicts, lists and strings.

    Namespaces are dropped from tag names and attributes are ignored.

    Raises:
        xml.etree.ElementTree.ParseError: If ``text`` is not well-formed XML
    """
    root = ET.fromstring(text)
    return {_local_name(root.tag): _element_to_node(root)}


def _parse_period_start(period: dict[str, Any]) -> datetime | None:
    interval = period.get("timeInterval")
    if not isinstance(interval, dict):
        return None
    start = interval.get("start")
    if not isinstance(start, str) or not start:
        return None
    try:
        parsed = dt_util.parse_datetime(start)
    except ValueError:
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt_util.UTC)
    return dt_util.as_utc(parsed)


def _parse_resolution(code: Any) -> int:
    if isinstance(code, str):
        return RESOLUTION_MINUTES.get(code.strip(), DEFAULT_RESOLUTION_MINUTES)
    return DEFAULT_RESOLUTION_MINUTES


def _parse_position(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 1


def _parse_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    # float() accepts "nan" and "inf"
    if not math.isfinite(price):
        return 0.0
    return price


def _acknowledgement_reason(raw: dict[str, Any]) -> str | None:
    ack = raw.get(ACKNOWLEDGEMENT_DOCUMENT)
    if not isinstance(ack, dict):
        return None
    for reason in as_list(ack.get("Reason")):
        if isinstance(reason, dict) and reason.get("text"):
            return reason["text"]
    return None


def _log_price_table(slots: list[TimeSlot]) -> None:
    if not _LOGGER.isEnabledFor(logging.DEBUG):
        return
    rows = [f"  {slot.start.isoformat()}  {slot.price:>10.2f}" for slot in slots]
    _LOGGER.debug("Parsed %s price slots:\n%s", len(slots), "\n".join(rows))


def parse_document(raw: dict[str, Any]) -> list[TimeSlot]:
    """Flatten all series, periods and points into sorted price slots.

    Never raises on shape problems: a document without time series yields
    an empty list, a period without a start is skipped, and unreadable
    positions and prices fall back to 1 and 0.

    Args:
        raw: Tree as produced by ``xml_to_tree``

    Returns:
        Slots sorted by start; slots sharing a start keep document order
    """
    document = raw.get(PUBLICATION_DOCUMENT) if isinstance(raw, dict) else None
    if not isinstance(document, dict) or not document.get("TimeSeries"):
        reason = _acknowledgement_reason(raw) if isinstance(raw, dict) else None
        if reason:
            _LOGGER.warning("ENTSO-E returned no time series: %s", reason)
        else:
            _LOGGER.warning("ENTSO-E document contains no time series")
        return []

    slots: list[TimeSlot] = []
    for series in as_list(document["TimeSeries"]):
        if not isinstance(series, dict):
            continue
        for period in as_list(series.get("Period")):
            if not isinstance(period, dict):
                continue

            period_start = _parse_period_start(period)
            if period_start is None:
                _LOGGER.warning("Skipping period without a valid start: %s", period.get("timeInterval"))
                continue

            duration = timedelta(minutes=_parse_resolution(period.get("resolution")))

            for point in as_list(period.get("Point")):
                if not isinstance(point, dict):
                    continue
                offset = _parse_position(point.get("position")) - 1
                slots.append(
                    TimeSlot(
                        start=period_start + offset * duration,
                        price=_parse_price(point.get("price.amount")),
                    )
                )

    if not slots:
        _LOGGER.warning("ENTSO-E document contains no usable price points")
        return slots

    slots.sort(key=attrgetter("start"))
    _log_price_table(slots)
    return slots

"""Constants for the EPEX Monitor integration."""

DOMAIN = "epex_monitor"

ENTSOE_API_URL = "https://web-api.tp.entsoe.eu/api"
API_KEY_HEADER = "X-Api-Key"
API_TIMEOUT = 30  # seconds

# Configuration keys
CONF_API_KEY = "api_key"
CONF_REFRESH_INTERVAL = "refresh_interval"
CONF_DOCUMENT_TYPE = "document_type"
CONF_IN_DOMAIN = "in_domain"
CONF_OUT_DOMAIN = "out_domain"
CONF_MAX_RATE = "max_rate"
CONF_MAX_PRICE = "max_price"  # older name of max_rate, still read

# Defaults
DEFAULT_REFRESH_INTERVAL = 15  # minutes
MIN_REFRESH_INTERVAL = 15  # minutes
DEFAULT_DOCUMENT_TYPE = "A44"  # day-ahead prices
DEFAULT_BIDDING_ZONE = "10YNL----------L"
DEFAULT_MAX_RATE = 100.0  # ct/kWh, published when no live price exists

# Price window
WINDOW_HOURS = 48
WIRE_TIMESTAMP_FORMAT = "%Y%m%d%H%M"

# Period resolution codes (minutes per point)
RESOLUTION_MINUTES = {
    "PT15M": 15,
    "PT30M": 30,
    "PT60M": 60,
}
DEFAULT_RESOLUTION_MINUTES = 60

# EUR/MWh -> ct/kWh
PRICE_DIVISOR = 10
PRICE_UNIT = "ct/kWh"

CHEAPEST_SLOT_COUNT = 5

SERVICE_REFRESH_PRICE = "refresh_price"

STATUS_LIVE = "live"
STATUS_FALLBACK = "fallback"
STATUS_FAILED = "failed"

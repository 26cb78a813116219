"""Application constants."""

USER_AGENT = "infrascan/0.3 (+environmental-assessment; contact: configured-email)"
OVERPASS_SOURCE_NAME = "OpenStreetMap Overpass API"
DEFAULT_OVERPASS_ENDPOINT = "https://overpass-api.de/api/interpreter"
DEFAULT_QUERY_TIMEOUT_SECONDS = 25
DEFAULT_RADIUS_M = 1000.0
# Metres per degree of latitude, small-area approximation.
METERS_PER_DEGREE = 111320.0
ELEMENT_TYPES = ("node", "way", "relation")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "request_id",
    "stage",
    "category",
    "event",
    "status",
    "status_code",
    "duration_ms",
    "elements",
    "error_code",
    "message",
)

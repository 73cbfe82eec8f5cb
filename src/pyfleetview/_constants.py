"""Internal constants shared across the library."""

from datetime import timedelta

USER_AGENT = "pyfleetview/0.1 (+https://github.com/traccar/traccar)"
CONTENT_TYPE = "application/json"

# ------------------------------------------------------------------
# Telemetry server endpoints
# ------------------------------------------------------------------

DEVICES_ENDPOINT = "/devices"
POSITIONS_ENDPOINT = "/positions"

# ------------------------------------------------------------------
# Reverse geocoding (Nominatim)
# ------------------------------------------------------------------

GEOCODE_URL = "https://nominatim.openstreetmap.org/reverse"
GEOCODE_ZOOM = 18
UNKNOWN_LOCATION = "Unknown location"
GEOCODE_FAILED_ADDRESS = "Address lookup failed"

# ------------------------------------------------------------------
# Engine tuning
# ------------------------------------------------------------------

#: A device is online while its last report is younger than this.
STALENESS_THRESHOLD = timedelta(minutes=5)

#: Maximum number of distinct points kept per device trail.
PATH_TRAIL_LIMIT = 10

#: Seconds between two scheduled polls.
POLL_INTERVAL = 30.0

REQUEST_TIMEOUT = 10.0

FETCH_ERROR_MESSAGE = "Failed to fetch data. Please check if Traccar server is running."

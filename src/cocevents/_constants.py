"""Internal constants shared across the library."""

BASE_URL = "https://api.clashofclans.com/v1"

DEFAULT_RATE_LIMIT = 10
DEFAULT_REFRESH_RATE = 2 * 60.0
DEFAULT_MAINTENANCE_INTERVAL = 0.5 * 60.0

#: Status the transport reports when no HTTP response was received.
TRANSPORT_FAILURE_STATUS = 504
MAINTENANCE_STATUS = 503
OK_STATUS = 200

# Cache-busting range for the maintenance probe's ``minMembers`` parameter.
PROBE_MIN_MEMBERS_LOW = 10
PROBE_MIN_MEMBERS_SPAN = 40

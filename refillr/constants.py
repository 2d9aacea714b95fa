"""Platform-wide constants"""

DEFAULT_CANCELLATION_REASON = "Cancelled by user"

# Upper bound for any radius a caller may ask for
MAX_SEARCH_RADIUS_METERS = 50000

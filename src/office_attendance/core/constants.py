"""Geofence, notes and paging defaults."""

EARTH_RADIUS_METERS = 6_371_000

NOTES_MAX_LENGTH = 500
NOTES_SEPARATOR = "\n"

DEFAULT_RECENT_LIMIT = 5
DEFAULT_HISTORY_PAGE_SIZE = 15
DEFAULT_REPORT_PAGE_SIZE = 20

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0

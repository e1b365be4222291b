"""Constants for the Metra GTFS endpoints.

The realtime feed requires an API token passed as the ``api_token`` query
parameter. The static schedule endpoints are public.
"""

# Realtime trip updates (GTFS-Realtime protobuf)
METRA_FEED_URL = "https://gtfspublic.metrarr.com/gtfs/public/tripupdates"
TOKEN_PARAM = "api_token"

# Static schedule: a one-line version marker and the zipped dataset
METRA_SCHEDULE_BASE_URL = "https://schedules.metrarail.com/gtfs"
METRA_SCHEDULE_VERSION_URL = f"{METRA_SCHEDULE_BASE_URL}/published.txt"
METRA_SCHEDULE_ARCHIVE_URL = f"{METRA_SCHEDULE_BASE_URL}/schedule.zip"

FEED_TIMEOUT_SECONDS = 15.0
SCHEDULE_TIMEOUT_SECONDS = 20.0

# Live departures this long past their effective time are still shown
DEPARTED_GRACE_SECONDS = 60

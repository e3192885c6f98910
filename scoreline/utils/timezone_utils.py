"""
Timezone utility functions for Scoreline

Datetimes are stored as naive UTC. Input without an offset is read in the
application's configured timezone.
"""

from datetime import datetime, timezone

import pytz
from flask import current_app

from scoreline.exceptions import ScorelineError


def get_app_timezone():
    """Get the application's configured timezone"""
    try:
        timezone_name = current_app.config.get("TIMEZONE", "UTC")
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def convert_to_utc(dt):
    """Convert a datetime to naive UTC for storage"""
    if dt is None:
        return None

    # If datetime is naive, assume it's in the application timezone
    if dt.tzinfo is None:
        dt = get_app_timezone().localize(dt)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value, field="deadline"):
    """Parse an ISO 8601 string into naive UTC"""
    if isinstance(value, datetime):
        return convert_to_utc(value)
    try:
        return convert_to_utc(datetime.fromisoformat(str(value).strip()))
    except ValueError:
        raise ScorelineError(f"{field} must be an ISO 8601 datetime, got {value!r}")

"""Timezone resolution and localization utilities."""

import logging
from datetime import datetime
from typing import Optional, Tuple

import pytz
import tzlocal
from dateutil import tz as du_tz

from icalshare.config.constants import ABBR_TO_TZ

logger = logging.getLogger(__name__)


def resolve_timezone(tz_str: Optional[str]) -> Tuple[object, Optional[str]]:
    """Resolve a timezone string to a timezone object.

    Args:
        tz_str: The timezone string (e.g., "EST", "America/New_York", "local").

    Returns:
        Tuple of (timezone_object, warning_message or None).
    """
    tz_str_raw = tz_str or "local"
    tz_upper = tz_str_raw.upper()
    warning = None

    if tz_upper == "LOCAL":
        # User's system zone (DST aware)
        local_tz_obj = tzlocal.get_localzone()
        tz_name = getattr(local_tz_obj, "key", None) or getattr(
            local_tz_obj, "zone", str(local_tz_obj)
        )
    else:
        tz_name = ABBR_TO_TZ.get(tz_upper, tz_str_raw)

    try:
        local_tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        # Last-ditch attempt with dateutil (may return fixed offset)
        local_tz = du_tz.gettz(tz_name)
        if local_tz is None:
            local_tz = pytz.utc
            warning = (
                f"Couldn't resolve timezone '{tz_str_raw}' - using UTC. "
                "Please verify the times in the exported calendar."
            )
            logger.warning(warning)

    return local_tz, warning


def attach_timezone(tzobj, naive_dt: datetime) -> datetime:
    """Return timezone-aware datetime, using proper DST rules where possible.

    Already-aware datetimes are returned unchanged.

    Args:
        tzobj: The timezone object (pytz or dateutil).
        naive_dt: A naive datetime to attach the timezone to.

    Returns:
        A timezone-aware datetime.
    """
    if naive_dt.tzinfo is not None:
        return naive_dt

    if hasattr(tzobj, "localize"):
        try:
            return tzobj.localize(naive_dt, is_dst=None)
        except (pytz.AmbiguousTimeError, pytz.NonExistentTimeError):
            # Fall back to is_dst=True on ambiguity (earlier) – still better than wrong offset
            return tzobj.localize(naive_dt, is_dst=True)
    # zoneinfo/dateutil – just set tzinfo; these implement DST via utcoffset()
    return naive_dt.replace(tzinfo=tzobj)


def to_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC."""
    return value.astimezone(pytz.utc)

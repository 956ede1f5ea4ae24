"""
duration.py
===========

Duration parsing and timestamp helpers.

Durations are written as an unsigned integer followed by a single unit letter
(``45s``, ``30m``, ``12h``, ``1d``) and parsed to milliseconds. Expiry instants
are aware UTC datetimes with millisecond precision, serialized as
``YYYY-MM-DDTHH:MM:SS.mmmZ``.
"""

import datetime
import re

from rolekeeper.datatypes.membership_datatypes import InvalidFormat

UNIT_MILLISECONDS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}

DURATION_PATTERN = re.compile(r"([0-9]+)([smhd])", re.ASCII)

MAX_INSTANT = datetime.datetime.max.replace(microsecond=999000, tzinfo=datetime.timezone.utc)


def parse_duration(text: str) -> int:
    """
    Convert a ``<digits><unit>`` duration string to milliseconds.

    Args:
        text (str): Duration such as ``"1d"`` or ``"30m"``.

    Returns:
        int: Duration in milliseconds. Zero is returned for ``"0s"`` and the
        like; callers that need a positive duration must check.

    Raises:
        InvalidFormat: If ``text`` is not exactly digits followed by one of
            ``s``, ``m``, ``h`` or ``d``.
    """
    if not isinstance(text, str):
        raise InvalidFormat(text)
    match = DURATION_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidFormat(text)
    value, unit = match.groups()
    return int(value) * UNIT_MILLISECONDS[unit]


def format_duration(milliseconds: int) -> str:
    """
    Render a millisecond duration as the largest whole unit, e.g. ``"2 days"``.
    """
    seconds = milliseconds // 1000
    if seconds < 60:
        return f"{seconds} sec{'s' if seconds != 1 else ''}"
    elif seconds < 3600:
        mins = seconds // 60
        return f"{mins} min{'s' if mins != 1 else ''}"
    elif seconds < 86400:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''}"
    else:
        days = seconds // 86400
        return f"{days} day{'s' if days != 1 else ''}"


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def truncate_to_millis(instant: datetime.datetime) -> datetime.datetime:
    return instant.replace(microsecond=instant.microsecond - instant.microsecond % 1000)


def add_milliseconds(instant: datetime.datetime, milliseconds: int) -> datetime.datetime:
    """
    Return ``instant + milliseconds``, truncated to whole milliseconds.

    Sums beyond the datetime range saturate at :data:`MAX_INSTANT` instead of
    raising.
    """
    try:
        result = instant + datetime.timedelta(milliseconds=milliseconds)
    except OverflowError:
        return MAX_INSTANT
    return truncate_to_millis(result)


def to_iso_string(instant: datetime.datetime) -> str:
    """Serialize an instant as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    instant = instant.astimezone(datetime.timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def from_iso_string(text: str) -> datetime.datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken to be UTC.

    Raises:
        ValueError: If ``text`` is not a valid ISO-8601 timestamp.
    """
    instant = datetime.datetime.fromisoformat(text)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=datetime.timezone.utc)
    return truncate_to_millis(instant.astimezone(datetime.timezone.utc))


def format_discord_timestamp(instant: datetime.datetime, style: str = "F") -> str:
    """Return Discord's ``<t:unix:style>`` markup for ``instant``."""
    return f"<t:{int(instant.timestamp())}:{style}>"

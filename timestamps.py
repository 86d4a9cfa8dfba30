"""
Timestamp normalisation.

Sources disagree on how they write a point in time: the local file stores
``2024-06-01T09:00:00``, the REST table answers ``2024-06-01 09:00:00.123+00``,
and legacy lines only carry ``2024-06-01``. ``normalize_timestamp`` runs a
small ordered list of parsers and returns the first hit as a naive datetime.

Offsets are validated but not applied: a value keeps the wall clock of the
offset it was written in, so a row is bucketed on the calendar day its
source saw.
"""
import re
from datetime import date, datetime

from errors import UnparsableTimestamp

_DATE = r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
_TIME = (
    r"(?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?"
)
_OFFSET = r"(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)"

_WITH_OFFSET = re.compile(rf"^{_DATE}[T ]{_TIME}{_OFFSET}$")
_WITHOUT_OFFSET = re.compile(rf"^{_DATE}[T ]{_TIME}$")
_DATE_ONLY = re.compile(rf"^{_DATE}$")


def _build(match):
    parts = match.groupdict()
    fraction = (parts.get("fraction") or "")[:6].ljust(6, "0")
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts.get("hour") or 0),
            int(parts.get("minute") or 0),
            int(parts.get("second") or 0),
            int(fraction),
        )
    except ValueError:
        # e.g. 2024-02-30
        return None


def _offset_is_valid(offset):
    if offset == "Z":
        return True
    # "+00" is shorthand for "+00:00"
    digits = offset[1:].replace(":", "")
    if len(digits) == 2:
        digits += "00"
    hours, minutes = int(digits[:2]), int(digits[2:])
    return hours <= 23 and minutes <= 59


def parse_with_offset(token):
    match = _WITH_OFFSET.match(token)
    if not match or not _offset_is_valid(match.group("offset")):
        return None
    return _build(match)


def parse_without_offset(token):
    match = _WITHOUT_OFFSET.match(token)
    return _build(match) if match else None


def parse_date_only(token):
    match = _DATE_ONLY.match(token)
    return _build(match) if match else None


# Tried in order; the first parser that returns a datetime wins.
PARSERS = (parse_with_offset, parse_without_offset, parse_date_only)


def normalize_timestamp(token):
    """Parse a textual timestamp into a naive datetime.

    Raises UnparsableTimestamp when no parser accepts the token.
    """
    if isinstance(token, datetime):
        return token.replace(tzinfo=None)
    if isinstance(token, date):
        return datetime(token.year, token.month, token.day)
    if token is None:
        raise UnparsableTimestamp(token)

    text = str(token).strip()
    for parser in PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    raise UnparsableTimestamp(token)


def to_date(val):
    """Normalize a date-like value to a datetime.date or return None."""
    try:
        return normalize_timestamp(val).date()
    except UnparsableTimestamp:
        return None


def format_timestamp(at):
    """Render a timestamp the way the local file stores it (ISO-8601, seconds precision)."""
    return at.replace(microsecond=0).isoformat()

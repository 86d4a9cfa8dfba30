"""
Tabular record parser.

Turns a header line plus data lines (from the local file or a REST response
asked for ``text/csv``) into MoodObservation objects. Columns are located by
name, so their order does not matter. Rows that cannot be read are dropped
one at a time; a header without the required columns drops the whole batch.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from errors import UnparsableTimestamp, UnrecognizedSchema
from observations import MoodObservation
from timestamps import normalize_timestamp

logger = logging.getLogger(__name__)

COLUMN_SYNONYMS = {
    "mood": {"mood", "moods"},
    "score": {"score", "skor"},
    "timestamp": {"timestamp", "time", "created_at"},
    "user": {"user_id", "userid", "user"},
}

# Old local files were written as "date,mood" with no score column.
LEGACY_TIMESTAMP_NAMES = COLUMN_SYNONYMS["timestamp"] | {"date"}

REQUIRED_COLUMNS = ("mood", "score", "timestamp")


@dataclass(frozen=True)
class ColumnMap:
    mood: int
    timestamp: int
    score: Optional[int] = None
    user: Optional[int] = None

    @property
    def required_width(self):
        indices = [self.mood, self.timestamp]
        if self.score is not None:
            indices.append(self.score)
        return max(indices) + 1


def unquote(value):
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value


def split_line(line):
    return [unquote(part) for part in line.split(",")]


def resolve_columns(header):
    """Locate the logical columns in a header line.

    Raises UnrecognizedSchema when mood, score or timestamp is missing,
    except for the two-column legacy header ``date,mood``.
    """
    names = [name.lower() for name in split_line(header)]
    found = {}
    for idx, name in enumerate(names):
        for logical, synonyms in COLUMN_SYNONYMS.items():
            if name in synonyms:
                found[logical] = idx

    if all(col in found for col in REQUIRED_COLUMNS):
        return ColumnMap(
            mood=found["mood"],
            timestamp=found["timestamp"],
            score=found["score"],
            user=found.get("user"),
        )

    if len(names) == 2 and "mood" in found:
        other = 1 - found["mood"]
        if names[other] in LEGACY_TIMESTAMP_NAMES:
            return ColumnMap(mood=found["mood"], timestamp=other)

    missing = [col for col in REQUIRED_COLUMNS if col not in found]
    raise UnrecognizedSchema(header, missing)


def parse_row(fields, columns):
    """Build one observation from split fields, or return None when the row is unusable."""
    if len(fields) < columns.required_width:
        return None

    mood = fields[columns.mood]
    raw_score = fields[columns.score] if columns.score is not None else None
    owner = None
    if columns.user is not None and columns.user < len(fields):
        owner = fields[columns.user]

    try:
        at = normalize_timestamp(fields[columns.timestamp])
    except UnparsableTimestamp:
        return None
    return MoodObservation.from_fields(mood, raw_score, at, owner)


def parse_rows(header, lines, strict=False):
    """Parse data lines against a header.

    With ``strict=False`` an unrecognised header is logged and yields an empty
    list; with ``strict=True`` the UnrecognizedSchema error propagates.
    """
    if header is None or not header.strip():
        return []
    try:
        columns = resolve_columns(header)
    except UnrecognizedSchema as exc:
        if strict:
            raise
        logger.warning("Dropping batch: %s", exc.message)
        return []

    observations = []
    for line in lines:
        if not line or not line.strip():
            continue
        observation = parse_row(split_line(line.strip()), columns)
        if observation is None:
            logger.debug("Skipping malformed row: %r", line)
            continue
        observations.append(observation)
    return observations


def parse_table(rows, strict=False):
    """Parse a sequence whose first element is the header line."""
    rows = list(rows)
    if not rows:
        return []
    return parse_rows(rows[0], rows[1:], strict=strict)


def parse_csv_text(text, strict=False):
    """Parse a whole CSV response body; a header with no data is an empty result."""
    if not text or not text.strip():
        return []
    return parse_table(re.split(r"\r?\n", text.strip()), strict=strict)

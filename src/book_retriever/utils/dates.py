"""Date coercion for publication dates.

Sources report publication dates as full ISO strings, bare years,
two-digit years, dotted European dates, partial year-month strings or
epoch seconds. ``coerce_date`` folds all of them into one ``date`` (or
``datetime``), returning None rather than raising when nothing fits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any


@dataclass
class ParsedDate:
    """Structured date with precision tracking."""

    year: int | None = None
    month: int | None = None
    day: int | None = None
    original: str = ""

    @property
    def precision(self) -> str:
        """Return date precision level."""
        if self.day and self.month and self.year:
            return "exact"
        elif self.month and self.year:
            return "month"
        elif self.year:
            return "year"
        return "unknown"

    def to_date(self) -> date | None:
        """Build a calendar date, defaulting missing month/day to 1."""
        if not self.year:
            return None
        try:
            return date(self.year, self.month or 1, self.day or 1)
        except ValueError:
            return None


MONTH_NAMES = {
    "january": 1, "jan": 1, "janvier": 1, "janv": 1,
    "february": 2, "feb": 2, "fevrier": 2, "février": 2, "fevr": 2, "févr": 2,
    "march": 3, "mar": 3, "mars": 3,
    "april": 4, "apr": 4, "avril": 4, "avr": 4,
    "may": 5, "mai": 5,
    "june": 6, "jun": 6, "juin": 6,
    "july": 7, "jul": 7, "juillet": 7, "juil": 7,
    "august": 8, "aug": 8, "aout": 8, "août": 8,
    "september": 9, "sep": 9, "sept": 9, "septembre": 9,
    "october": 10, "oct": 10, "octobre": 10,
    "november": 11, "nov": 11, "novembre": 11,
    "december": 12, "dec": 12, "decembre": 12, "décembre": 12, "déc": 12,
}

# Tried in order; the first one that parses wins.
STRING_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%z",  # ATOM / RFC 3339
    "%Y-%m-%d",
    "%d.%m.%Y",  # also matches 5.6.2019, %d and %m accept one digit
    "%Y-%m",
    "%m-%Y",
)

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: Any) -> bool:
    """True for ints, floats and numeric strings (booleans excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_RE.match(value))
    return False


def parse_date(date_str: str) -> ParsedDate:
    """Parse a free-form date string into structured components.

    Handles:
    - ISO: 1932-06-09, 1932-06 or 1932
    - Day month year: 9 JUN 1932, 9 juin 1932
    - Month year: JUN 1932
    - US: June 9, 1932
    - Numeric: 6/9/1932, 9/6/1932 (a component above 12 decides the order)

    Args:
        date_str: Date string in various formats

    Returns:
        ParsedDate with extracted components (all None when nothing matched)
    """
    if not date_str:
        return ParsedDate(original=date_str)

    result = ParsedDate(original=date_str)
    text = " ".join(date_str.strip().split()).upper()

    iso_match = re.match(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?$", text)
    if iso_match:
        result.year = int(iso_match.group(1))
        if iso_match.group(2):
            result.month = int(iso_match.group(2))
        if iso_match.group(3):
            result.day = int(iso_match.group(3))
        return result

    dmy_match = re.match(r"^(\d{1,2})(?:ER)?\s+([^\W\d_]{3,9})\.?\s+(\d{4})$", text)
    if dmy_match:
        month = MONTH_NAMES.get(dmy_match.group(2).lower())
        if month:
            result.day = int(dmy_match.group(1))
            result.month = month
            result.year = int(dmy_match.group(3))
        return result

    my_match = re.match(r"^([^\W\d_]{3,9})\.?\s+(\d{4})$", text)
    if my_match:
        month = MONTH_NAMES.get(my_match.group(1).lower())
        if month:
            result.month = month
            result.year = int(my_match.group(2))
        return result

    us_match = re.match(r"^([^\W\d_]{3,9})\.?\s+(\d{1,2}),?\s+(\d{4})$", text)
    if us_match:
        month = MONTH_NAMES.get(us_match.group(1).lower())
        if month:
            result.month = month
            result.day = int(us_match.group(2))
            result.year = int(us_match.group(3))
        return result

    numeric_match = re.match(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$", text)
    if numeric_match:
        a, b, year = int(numeric_match.group(1)), int(numeric_match.group(2)), int(numeric_match.group(3))
        result.year = year
        # a component above 12 can only be the day
        if a > 12:
            result.day = a
            result.month = b
        elif b > 12:
            result.month = a
            result.day = b
        else:
            # Ambiguous - assume M/D/YYYY (US format)
            result.month = a
            result.day = b
        return result

    return result


def _from_number(value: int | float | str) -> datetime | None:
    # JSON decoders hand years over as 2020.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    try:
        if len(text) == 2:
            return datetime.strptime(f"{text}-01-01", "%y-%m-%d")
        if len(text) == 4:
            return datetime.strptime(f"{text}-01-01", "%Y-%m-%d")
        return datetime.fromtimestamp(float(text), tz=UTC)
    except (ValueError, OverflowError, OSError):
        return None


def _from_string(value: str) -> date | None:
    text = value.strip()
    for fmt in STRING_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return parse_date(text).to_date()


def coerce_date(value: Any) -> date | None:
    """Turn one raw value into a calendar date.

    Order of attempts:
    1. date/datetime values are returned unchanged
    2. numbers (and numeric strings): 2 digits is a two-digit year, 4 digits
       a year, anything else Unix epoch seconds
    3. the fixed STRING_FORMATS, first match wins
    4. the generic ``parse_date`` heuristic

    Returns:
        The coerced date, or None when the value is unparseable
    """
    if isinstance(value, date):
        return value
    if value is None or isinstance(value, bool):
        return None
    if is_numeric(value):
        return _from_number(value)
    if isinstance(value, str):
        return _from_string(value)
    return None

"""Date normalization for spreadsheet values.

Sheet cells hold dates in whatever shape the editor typed them: day-first
``25/12/2024`` strings, ISO strings, spreadsheet serial day counts, or native
date objects from other loaders. Every value is resolved to a plain calendar
date in UTC so comparisons and display never depend on the local timezone.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional
import logging
import re

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Spreadsheet serial day 0; 1899-12-30 absorbs the 1900 leap-year bug.
SERIAL_EPOCH = date(1899, 12, 30)
SERIAL_THRESHOLD = 10000

_DAY_FIRST_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")

# Fixed defaults for dateutil so missing components never come from "now".
# Parsing against both reveals strings that carry no year of their own.
_PARSE_DEFAULT = datetime(1970, 1, 1)
_ALT_DEFAULT = datetime(1971, 1, 1)

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

NOT_AVAILABLE = "N/A"


class RawDateKind(Enum):
    """Shapes a raw sheet date can take."""
    NATIVE = "native"
    DAY_FIRST = "day_first"
    SERIAL = "serial"
    TEXT = "text"
    EMPTY = "empty"


@dataclass(frozen=True)
class RawDate:
    """A raw date value tagged with its detected shape."""
    kind: RawDateKind
    value: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "RawDate":
        """Classify a raw cell value.

        Args:
            value: Anything a loader may put in a date column

        Returns:
            RawDate tagged with the matching kind
        """
        if isinstance(value, RawDate):
            return value
        if value is None or isinstance(value, bool):
            return cls(RawDateKind.EMPTY)
        if isinstance(value, (date, datetime)):
            return cls(RawDateKind.NATIVE, value)
        if isinstance(value, (int, float)):
            if value > 0:
                return cls(RawDateKind.SERIAL, float(value))
            return cls(RawDateKind.EMPTY)
        if not isinstance(value, str):
            return cls(RawDateKind.EMPTY)

        text = value.strip()
        if not text:
            return cls(RawDateKind.EMPTY)
        if _DAY_FIRST_RE.match(text):
            return cls(RawDateKind.DAY_FIRST, text)
        if _NUMERIC_RE.match(text) and float(text) > SERIAL_THRESHOLD:
            return cls(RawDateKind.SERIAL, float(text))
        return cls(RawDateKind.TEXT, text)

    def resolve(self) -> Optional[date]:
        """Resolve to a UTC calendar date, or None if the value is not a date."""
        if self.kind is RawDateKind.NATIVE:
            return _native_to_date(self.value)
        if self.kind is RawDateKind.DAY_FIRST:
            day, month, year = (int(group) for group in _DAY_FIRST_RE.match(self.value).groups())
            try:
                return date(year, month, day)
            except ValueError:
                # Not a valid day-first date (e.g. 12/25/2024); try other readings.
                return _parse_text(self.value)
        if self.kind is RawDateKind.SERIAL:
            return serial_to_date(self.value)
        if self.kind is RawDateKind.TEXT:
            return _parse_text(self.value)
        return None


def _native_to_date(value: date) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def serial_to_date(serial: float) -> Optional[date]:
    """Convert a spreadsheet serial day count to a date, dropping time of day."""
    try:
        return SERIAL_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        logger.debug(f"Serial date out of range: {serial}")
        return None


def _parse_text(text: str) -> Optional[date]:
    try:
        parsed = date_parser.parse(text, default=_PARSE_DEFAULT)
        if date_parser.parse(text, default=_ALT_DEFAULT).year != parsed.year:
            logger.debug(f"Date string has no year: {text!r}")
            return None
    except (ValueError, OverflowError):
        return None
    # Keep the calendar components as written; ignore any parsed timezone.
    return date(parsed.year, parsed.month, parsed.day)


def parse_date(raw: Any) -> Optional[date]:
    """Normalize a raw sheet value to a UTC calendar date.

    Resolution order: native dates, day-first ``D/M/YYYY`` strings, serial day
    counts, then generic date-string parsing.

    Args:
        raw: String, number, date, datetime, RawDate or None

    Returns:
        The calendar date, or None when the value is empty or unparseable
    """
    return RawDate.from_value(raw).resolve()


def to_display(raw: Any) -> str:
    """Format a raw date as ``Mon D, YYYY``, or ``N/A`` when unparseable."""
    parsed = parse_date(raw)
    if parsed is None:
        return NOT_AVAILABLE
    return f"{_MONTH_ABBR[parsed.month - 1]} {parsed.day}, {parsed.year}"


def to_iso_date(raw: Any) -> Optional[str]:
    """Format a raw date as ``YYYY-MM-DD``, or None when unparseable."""
    parsed = parse_date(raw)
    return parsed.isoformat() if parsed else None


def utc_today(now: Optional[datetime] = None) -> date:
    """Return the current UTC calendar date.

    Args:
        now: Optional reference instant; naive values are taken as UTC
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return _native_to_date(now)

"""Per-field rewrites applied to every Timing data row."""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any

HOURS_LETTERS = ("s", "m", "h")
SECONDS_PER_HOUR = 3600.0

_ISO_Z_RE = re.compile(r"[zZ]$")
_LEADING_NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?")


class ConversionError(ValueError):
    def __init__(self, message: str, row_number: int | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.row_number is None:
            return message
        return f"Row {self.row_number}: {message}"


class MissingColumnsError(ConversionError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__("Export is missing required columns: " + ", ".join(missing))
        self.missing = list(missing)


class DurationFormat(str, Enum):
    CLOCK = "clock"
    LETTER_SUFFIXED = "letter-suffixed"
    DECIMAL = "decimal"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def detect_duration_format(value: Any) -> DurationFormat:
    duration = _text(value)
    if ":" in duration:
        return DurationFormat.CLOCK
    if any(letter in duration for letter in HOURS_LETTERS):
        return DurationFormat.LETTER_SUFFIXED
    return DurationFormat.DECIMAL


class DurationTransform:
    """
    Rewrites the duration cell according to the format of the first value seen.

    Detection happens once per run; every later row is treated as the same
    format whatever it actually contains. Only decimal seconds are converted,
    clock and letter-suffixed values pass through untouched. Under the decimal
    format a cell that is not a plain number is read from its leading number
    (0 when there is none) and recorded in ``coerced``.
    """

    def __init__(self) -> None:
        self.format: DurationFormat | None = None
        self.coerced: list[str] = []

    def __call__(self, value: Any) -> Any:
        if self.format is None:
            self.format = detect_duration_format(value)
        if self.format is not DurationFormat.DECIMAL:
            return value
        seconds, exact = parse_seconds(value)
        if not exact:
            self.coerced.append(_text(value))
        return round(seconds / SECONDS_PER_HOUR, 2)


def parse_seconds(value: Any) -> tuple[float, bool]:
    """Return (seconds, exact); exact is False when only a leading number was usable."""
    raw = _text(value).strip()
    if not raw:
        return 0.0, True
    match = _LEADING_NUMBER_RE.match(raw)
    if match is None:
        return 0.0, False
    return float(match.group(0)), match.end() == len(raw)


def seconds_to_hours(value: Any) -> float:
    seconds, _ = parse_seconds(value)
    return round(seconds / SECONDS_PER_HOUR, 2)


def transform_date(value: Any) -> str:
    # Spreadsheet cells arrive as native objects; keep the calendar date as written.
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    raw = _text(value).strip()
    if not raw:
        raise ConversionError("Start Date is empty")
    try:
        parsed = datetime.fromisoformat(_ISO_Z_RE.sub("+00:00", raw))
    except ValueError as exc:
        raise ConversionError(f"Start Date {raw!r} is not an ISO 8601 date") from exc
    return parsed.date().isoformat()


def split_project(value: Any, separator: str) -> tuple[str, str]:
    crumbs = [crumb.strip() for crumb in _text(value).split(separator)]
    # a dangling separator does not name a project
    while len(crumbs) > 1 and not crumbs[-1]:
        crumbs.pop()
    return crumbs[0], crumbs[-1]


def mark_notes(value: Any, marker: str) -> str:
    notes = _text(value)
    if not notes:
        return marker
    return f"{notes} {marker}"

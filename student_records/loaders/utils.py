"""
Shared utilities for spreadsheet ingestion: cell text coercion, date
normalisation, header key expansion.
"""

import logging
import re
from datetime import date, datetime
from typing import Any

from ..config import CHECKED

logger = logging.getLogger(__name__)

SEPARATOR_REGEX = re.compile(r"[;,]")
HEADER_SEPARATOR_REGEX = re.compile(r"\s*[,/]\s*")
DATE_REGEX = re.compile(r"\d{1,2}/\d{1,2}/\d{2}")

# Accepted cell date formats (month first)
_DATE_FORMATS = [
    "%m/%d/%Y",    # 10/4/2021
    "%m/%d/%y",    # 10/4/21
    "%Y-%m-%d",    # 2021-10-04
]


def cell_text(val: Any) -> str:
    """Render a raw openpyxl cell value as the text a user typed.

    Whole floats lose their trailing ".0" so checkbox cells read "1", and
    native dates are written back in M/D/YYYY form.
    """
    if val is None:
        return ""
    if isinstance(val, bool):
        return "1" if val else ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    if isinstance(val, (datetime, date)):
        return format_date(val)
    return str(val).strip()


def format_date(val: date) -> str:
    """Format a date as M/D/YYYY without zero padding."""
    return f"{val.month}/{val.day}/{val.year}"


def split_and_trim(value: str, separator: re.Pattern | str | None = None) -> list[str]:
    """Split on ';' or ',' (or a custom separator) and strip each piece."""
    sep = separator if separator is not None else SEPARATOR_REGEX
    if isinstance(sep, str):
        pieces = value.split(sep)
    else:
        pieces = sep.split(value)
    return [piece.strip() for piece in pieces]


def parse_date(value: str | None) -> str | None:
    """Parse the last ';'/','-separated date in a cell into M/D/YYYY.

    Returns None for empty or unparseable values.
    """
    if not value:
        return None

    candidate = split_and_trim(value)[-1]
    for fmt in _DATE_FORMATS:
        try:
            return format_date(datetime.strptime(candidate, fmt))
        except ValueError:
            continue

    # Fall back to a date embedded in free text, e.g. "sent 10/4/21"
    match = DATE_REGEX.search(candidate)
    if match:
        try:
            return format_date(datetime.strptime(match.group(0), "%m/%d/%y"))
        except ValueError:
            pass

    logger.debug("Could not parse date value: '%s'", value)
    return None


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None:
        return None
    if isinstance(val, str):
        val = val.strip()
        if val.startswith("=") or not val:
            return None
        # Handle percentage strings like "78%"
        if val.endswith("%"):
            try:
                return float(val[:-1])
            except ValueError:
                return None
        try:
            return float(val)
        except ValueError:
            return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def is_checked(value: str) -> bool:
    """True when a checkbox-style cell holds the number 1."""
    return safe_float(value) == CHECKED


def expand(mapping: dict[str, Any]) -> dict[str, Any]:
    """Expand keys holding a comma/slash-separated list into one key each.

    {"A, B": x, "C": y} -> {"A": x, "B": x, "C": y}. Key order follows the
    original key order, then position within each list.
    """
    expanded: dict[str, Any] = {}
    for key, target in mapping.items():
        for subkey in HEADER_SEPARATOR_REGEX.split(str(key)):
            if subkey:
                expanded[subkey] = target
    return expanded


def generate_keys(key_name: str, end_num: int, include_key_name: bool = True) -> str:
    """Comma-joined header keys for a repeating column group.

    generate_keys("Session", 3) -> "Session,Session0,Session1,Session2"
    """
    keys = [key_name] if include_key_name else []
    keys.extend(f"{key_name}{num}" for num in range(end_num))
    return ",".join(keys)


def find_header_row(
    sheet,
    signature: set[str],
    max_rows: int = 20,
) -> int | None:
    """Scan an openpyxl sheet for the row containing signature strings.

    Returns the 1-based row index where at least two cells match values
    in `signature`, or None if not found within `max_rows`.
    """
    for row_idx in range(1, max_rows + 1):
        matches = 0
        for cell in sheet[row_idx]:
            if cell.value is not None and str(cell.value).strip() in signature:
                matches += 1
        if matches >= 2:
            return row_idx
    return None

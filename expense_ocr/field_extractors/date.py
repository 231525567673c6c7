"""Date extraction helpers."""
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

MIN_YEAR_EXCLUSIVE = 2000
# Two-digit years 00-49 are 20xx and 50-99 are 19xx.
TWO_DIGIT_YEAR_MAX = 2049

DATE_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    (
        "labeled",
        re.compile(r"(?:date|issued|receipt date)[\s:]*(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})", re.IGNORECASE),
    ),
    ("trailing_year", re.compile(r"(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{4})")),
    ("leading_year", re.compile(r"(\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2})")),
]

# Month-first is preferred; day-first only applies when month-first is not a
# valid calendar date (e.g. 15/03/2024).
DATE_FORMATS = ["%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d", "%Y-%m-%d", "%d/%m/%Y"]


@dataclass
class DateCandidate:
    value: dt.datetime
    raw_text: str
    pattern: str


def _variants(raw: str) -> List[str]:
    return [raw, raw.replace(".", "/"), raw.replace("-", "/")]


def _parse(text: str) -> Optional[dt.datetime]:
    for fmt in DATE_FORMATS:
        try:
            parsed = dt.datetime.strptime(text, fmt)
        except ValueError:
            continue
        if fmt.endswith("%y") and parsed.year > TWO_DIGIT_YEAR_MAX:
            parsed = parsed.replace(year=parsed.year - 100)
        if parsed.year > MIN_YEAR_EXCLUSIVE:
            return parsed
    return None


def parse_date_text(raw: str) -> Optional[dt.datetime]:
    """Parse ``raw`` as-is, then with ``.`` and ``-`` swapped for ``/``."""

    for variant in _variants(raw):
        parsed = _parse(variant)
        if parsed is not None:
            return parsed
    return None


def extract_date(text: str) -> Optional[DateCandidate]:
    for name, pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        raw = match.group(1)
        parsed = parse_date_text(raw)
        if parsed is not None:
            return DateCandidate(value=parsed, raw_text=raw, pattern=name)
    return None


__all__ = ["DATE_PATTERNS", "DateCandidate", "extract_date", "parse_date_text"]

"""Rule-based amount extraction utilities."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Pattern, Tuple

MIN_AMOUNT = Decimal("0")
MAX_AMOUNT = Decimal("10000")

# Each pattern captures a whole numeric token, so "$99999.00" is one match
# (later dropped as implausible) rather than "$9999". Only tokens shaped like
# an amount become candidates.
_TOKEN = r"(?<![\d.,])(\d+(?:,\d+)*(?:\.\d{2})?)(?!\d)"
_TOKEN_2DP = r"(?<![\d.,])(\d+(?:,\d+)*\.\d{2})(?!\d)"
AMOUNT_SHAPE = re.compile(r"\d{1,4}(?:,\d{3})*(?:\.\d{2})?")

AMOUNT_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("labeled", re.compile(r"(?:total|subtotal|amount|sum)[\s:]*\$?\s*" + _TOKEN, re.IGNORECASE)),
    ("dollar", re.compile(r"\$\s*" + _TOKEN)),
    ("bare", re.compile(_TOKEN_2DP)),
]


@dataclass
class AmountCandidate:
    value: Decimal
    raw_text: str


@dataclass
class AmountExtraction:
    best: Optional[AmountCandidate]
    candidates: List[AmountCandidate] = field(default_factory=list)
    pattern: Optional[str] = None

    @property
    def value(self) -> Decimal:
        return self.best.value if self.best else Decimal("0")


def _normalise_number(text: str) -> Optional[Decimal]:
    cleaned = text.replace(",", "").strip()
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _is_plausible(value: Optional[Decimal]) -> bool:
    return value is not None and MIN_AMOUNT < value < MAX_AMOUNT


def extract_amount(text: str) -> AmountExtraction:
    """Return the largest plausible amount found by the highest priority pattern.

    Patterns are tried in order and the search stops at the first one that
    matches anything at all. Matches that are not shaped like an amount or fall
    outside ``(0, 10000)`` are discarded, but a pattern whose every match was
    discarded still ends the search.
    """

    for name, pattern in AMOUNT_PATTERNS:
        matches = [match.group(1) for match in pattern.finditer(text)]
        if not matches:
            continue
        candidates: List[AmountCandidate] = []
        for raw in matches:
            if not AMOUNT_SHAPE.fullmatch(raw):
                continue
            value = _normalise_number(raw)
            if not _is_plausible(value):
                continue
            candidates.append(AmountCandidate(value=value, raw_text=raw))
        best = max(candidates, key=lambda item: item.value, default=None)
        return AmountExtraction(best=best, candidates=candidates, pattern=name)
    return AmountExtraction(best=None)


__all__ = ["AMOUNT_PATTERNS", "AmountCandidate", "AmountExtraction", "extract_amount"]

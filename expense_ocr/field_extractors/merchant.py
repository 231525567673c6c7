"""Merchant extraction using line heuristics."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

STOP_WORDS = (
    "online",
    "receipt",
    "invoice",
    "bill",
    "total",
    "subtotal",
    "amount",
    "qty",
    "description",
)

AMOUNT_SHAPE = re.compile(r"[$£€¥]?\s*\d+")
DATE_SHAPE = re.compile(r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}")
BUSINESS_SUFFIX = re.compile(
    r"\b(inc|llc|ltd|co|corp|company|store|shop|restaurant|cafe|market)\b",
    re.IGNORECASE,
)

HEADER_LINES = 8
FALLBACK_LINES = 3
MIN_LENGTH = 3
MAX_LENGTH = 50


@dataclass
class MerchantCandidate:
    value: str
    line_index: int
    source: str


def split_lines(text: str) -> List[str]:
    stripped = (line.strip() for line in text.split("\n"))
    return [line for line in stripped if line]


def _has_stop_word(line: str) -> bool:
    lowered = line.lower()
    return any(word in lowered for word in STOP_WORDS)


def _looks_like_amount(line: str) -> bool:
    return bool(AMOUNT_SHAPE.search(line))


def _contains_date(line: str) -> bool:
    return bool(DATE_SHAPE.search(line))


def _is_header_candidate(line: str) -> bool:
    if _has_stop_word(line) or _looks_like_amount(line) or _contains_date(line):
        return False
    return MIN_LENGTH <= len(line) <= MAX_LENGTH


def _looks_like_business(line: str) -> bool:
    return bool(BUSINESS_SUFFIX.search(line)) or len(line) > 5


def extract_merchant(text: str) -> Optional[MerchantCandidate]:
    """Pick the store name from the top of the receipt.

    The first few lines are scanned for something that reads like a business
    name. If nothing qualifies, the first short line without digits among the
    top three is used instead.
    """

    lines = split_lines(text)

    for index, line in enumerate(lines[:HEADER_LINES]):
        if _is_header_candidate(line) and _looks_like_business(line):
            return MerchantCandidate(value=line, line_index=index, source="header")

    for index, line in enumerate(lines[:FALLBACK_LINES]):
        if 2 < len(line) < MAX_LENGTH and not _looks_like_amount(line) and not _contains_date(line):
            return MerchantCandidate(value=line, line_index=index, source="fallback")

    return None


__all__ = ["MerchantCandidate", "extract_merchant", "split_lines"]

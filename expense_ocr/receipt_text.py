"""Turn raw OCR text into a best-guess expense record.

``extract`` combines the amount, date and merchant heuristics from
``field_extractors`` into a single ``ExtractionResult``. It never raises: a
field whose heuristic finds nothing keeps its default (zero amount, ``now`` as
the date, empty merchant, and the generic ``"Receipt Purchase"`` title).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .field_extractors import extract_amount, extract_date, extract_merchant

LOGGER = logging.getLogger(__name__)

DEFAULT_TITLE = "Receipt Purchase"
TITLE_TEMPLATE = "Purchase at {merchant}"


@dataclass(frozen=True)
class ExtractionResult:
    title: str
    amount: Decimal
    date: datetime
    merchant: str

    @classmethod
    def placeholder(cls, title: str, now: datetime, merchant: str = "") -> "ExtractionResult":
        return cls(title=title, amount=Decimal("0"), date=now, merchant=merchant)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "amount": self.amount,
            "date": self.date,
            "merchant": self.merchant,
        }


def extract(text: Optional[str], now: Optional[datetime] = None) -> ExtractionResult:
    """Extract ``{title, amount, date, merchant}`` from OCR ``text``."""

    now = now or datetime.now()
    text = text or ""

    amount_info = extract_amount(text)
    date_info = extract_date(text)
    merchant_info = extract_merchant(text)

    date_value = now
    if date_info is not None:
        date_value = date_info.value.replace(tzinfo=now.tzinfo)

    if merchant_info is not None:
        merchant = merchant_info.value
        title = TITLE_TEMPLATE.format(merchant=merchant)
    else:
        merchant = ""
        title = DEFAULT_TITLE

    result = ExtractionResult(title=title, amount=amount_info.value, date=date_value, merchant=merchant)
    LOGGER.debug(
        "Extracted receipt fields: amount=%s (pattern=%s) date=%s merchant=%r",
        result.amount,
        amount_info.pattern,
        date_info.raw_text if date_info else None,
        result.merchant,
    )
    return result


__all__ = ["DEFAULT_TITLE", "ExtractionResult", "extract"]

"""Read an uploaded receipt image into an expense guess."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from . import ocr_extract
from .ocr_extract import OCRConfigurationError, OCRError
from .receipt_text import ExtractionResult, extract
from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)

MANUAL_ENTRY_TITLE = "Manual Entry Required"
OCR_FAILED_TITLE = "OCR Processing Failed"
UNKNOWN_MERCHANT = "Unknown"


def process_receipt(
    binary: bytes,
    filename: str = "receipt",
    *,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> ExtractionResult:
    """OCR ``binary`` and extract the expense fields.

    OCR failures never propagate: an unconfigured engine yields the
    "Manual Entry Required" placeholder and any other engine failure the
    "OCR Processing Failed" one, both with merchant ``"Unknown"``.
    """

    settings = settings or get_settings()
    now = now or settings.now()

    try:
        ocr_text = ocr_extract.extract_text(binary, filename, settings=settings)
    except OCRConfigurationError as exc:
        LOGGER.warning("OCR engine not configured, manual entry required: %s", exc)
        return ExtractionResult.placeholder(MANUAL_ENTRY_TITLE, now, merchant=UNKNOWN_MERCHANT)
    except OCRError as exc:
        LOGGER.warning("OCR processing failed: %s", exc, exc_info=LOGGER.isEnabledFor(logging.DEBUG))
        return ExtractionResult.placeholder(OCR_FAILED_TITLE, now, merchant=UNKNOWN_MERCHANT)

    LOGGER.info("OCR engine %s returned %d characters for %s", ocr_text.engine, len(ocr_text.text), filename)
    return extract(ocr_text.text, now)


__all__ = ["MANUAL_ENTRY_TITLE", "OCR_FAILED_TITLE", "UNKNOWN_MERCHANT", "process_receipt"]

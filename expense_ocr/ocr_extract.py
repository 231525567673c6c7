"""Receipt OCR engines.

Two engines turn an uploaded receipt image into raw text:

``ocrspace``
    The hosted OCR.space API (engine 2, orientation detection and upscaling
    enabled). Requires ``OCR_SPACE_API_KEY``.
``local``
    A local Tesseract install driven through ``pytesseract``. This is the same
    engine the browser falls back to when the server cannot read a receipt.

When ``OCR_LOCAL_FALLBACK`` is enabled a failing ``ocrspace`` call is retried
with the local engine. Parsing the text into expense fields is not done here;
see ``receipt_text.extract``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional

import pytesseract
import requests
from PIL import Image, UnidentifiedImageError

from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)

ENGINE_OCRSPACE = "ocrspace"
ENGINE_LOCAL = "local"


class OCRError(RuntimeError):
    """Base class for failures that prevent reading a receipt."""


class OCRConfigurationError(OCRError):
    """Raised when the selected OCR engine is not configured."""


class OCRServiceError(OCRError):
    """Raised when the upstream OCR engine fails."""


class OCRDecodeError(OCRError):
    """Raised when the image or the OCR output cannot be interpreted."""


@dataclass(frozen=True)
class OCRText:
    text: str
    engine: str


def extract_text(binary: bytes, filename: str = "receipt", settings: Optional[Settings] = None) -> OCRText:
    """Run the configured OCR engine over ``binary`` and return the raw text."""

    settings = settings or get_settings()
    if settings.ocr_engine == ENGINE_LOCAL:
        return OCRText(text=_ocr_local(binary, settings), engine=ENGINE_LOCAL)
    if settings.ocr_engine == ENGINE_OCRSPACE:
        try:
            return OCRText(text=_ocr_space(binary, filename, settings), engine=ENGINE_OCRSPACE)
        except OCRError as exc:
            if not settings.ocr_local_fallback:
                raise
            LOGGER.warning(
                "ocrspace_failed_falling_back: %s",
                exc,
                exc_info=LOGGER.isEnabledFor(logging.DEBUG),
            )
            return OCRText(text=_ocr_local(binary, settings), engine=ENGINE_LOCAL)
    raise OCRConfigurationError(f"unknown_ocr_engine:{settings.ocr_engine}")


def _ocr_space(binary: bytes, filename: str, settings: Settings) -> str:
    if not settings.ocr_space_api_key:
        raise OCRConfigurationError("ocr_space_api_key_missing")
    form = {
        "apikey": settings.ocr_space_api_key,
        "OCREngine": "2",
        "detectOrientation": "true",
        "scale": "true",
        "language": settings.ocr_language,
    }
    try:
        response = requests.post(
            settings.ocr_space_url,
            data=form,
            files={"file": (filename, binary)},
            timeout=settings.ocr_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise OCRServiceError("ocr_space_request_failed") from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise OCRDecodeError("ocr_space_invalid_json") from exc
    return _parsed_text(payload)


def _parsed_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        LOGGER.error("Unexpected OCR.space payload type: %s", type(payload))
        raise OCRDecodeError("ocr_space_unexpected_payload")

    if payload.get("IsErroredOnProcessing"):
        message = payload.get("ErrorMessage")
        if isinstance(message, list):
            message = "; ".join(str(item) for item in message)
        LOGGER.error("OCR.space reported an error: %s", message)
        raise OCRServiceError(f"ocr_space_error:{message}")

    results = payload.get("ParsedResults")
    if not isinstance(results, list) or not results:
        return ""
    first: Dict[str, Any] = results[0] if isinstance(results[0], dict) else {}
    text = first.get("ParsedText")
    return text if isinstance(text, str) else ""


def _ocr_local(binary: bytes, settings: Settings) -> str:
    image = _image_from_bytes(binary)
    try:
        return pytesseract.image_to_string(image, lang=settings.ocr_language)
    except pytesseract.TesseractNotFoundError as exc:
        raise OCRServiceError("tesseract_not_found") from exc
    except pytesseract.TesseractError as exc:
        raise OCRServiceError(f"tesseract_error:{exc}") from exc


def _image_from_bytes(binary: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(binary))
        image.load()
    except UnidentifiedImageError as exc:
        raise OCRDecodeError("unsupported_image_format") from exc
    except OSError as exc:
        raise OCRDecodeError("image_open_failed") from exc
    return image.convert("RGB")


__all__ = [
    "ENGINE_LOCAL",
    "ENGINE_OCRSPACE",
    "OCRConfigurationError",
    "OCRDecodeError",
    "OCRError",
    "OCRServiceError",
    "OCRText",
    "extract_text",
]

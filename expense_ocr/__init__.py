"""Receipt OCR backend for the expense tracker."""
from .receipt_text import ExtractionResult, extract

__all__ = ["ExtractionResult", "extract"]

"""Rule-based extractors for the fields of an expense receipt."""
from .amount import AmountCandidate, AmountExtraction, extract_amount
from .date import DateCandidate, extract_date
from .merchant import MerchantCandidate, extract_merchant, split_lines

__all__ = [
    "AmountCandidate",
    "AmountExtraction",
    "DateCandidate",
    "MerchantCandidate",
    "extract_amount",
    "extract_date",
    "extract_merchant",
    "split_lines",
]

"""FastAPI router definitions for the expense receipt OCR service."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from . import ocr_service
from .receipt_text import ExtractionResult
from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Expense Receipt OCR Service")

MAX_UPLOAD_SIZE = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/bmp",
}


class ReceiptResponse(BaseModel):
    title: str
    amount: float
    date: datetime
    merchant: str

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "ReceiptResponse":
        fields = result.as_dict()
        fields["amount"] = float(result.amount)
        return cls(**fields)


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="empty_file")
    if len(data) > MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="file_too_large")
    if (file.content_type or "").lower() not in ALLOWED_MIME_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="unsupported_mime")
    return data


@app.post("/api/expenses/process-receipt", response_model=ReceiptResponse)
async def process_receipt_upload(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
) -> ReceiptResponse:
    data = await _read_upload(file)
    filename = file.filename or "receipt"
    LOGGER.info("Processing receipt upload %s (%d bytes, %s)", filename, len(data), file.content_type)
    result = await run_in_threadpool(ocr_service.process_receipt, data, filename, settings=settings)
    return ReceiptResponse.from_result(result)


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    return {"status": "ok", "ocr_engine": settings.ocr_engine}


__all__ = ["app"]

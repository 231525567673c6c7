from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from expense_ocr import settings as settings_module  # noqa: E402

OCR_ENV_VARS = [
    "OCR_ENGINE",
    "OCR_SPACE_API_KEY",
    "OCR_SPACE_URL",
    "OCR_LANGUAGE",
    "OCR_TIMEOUT",
    "OCR_LOCAL_FALLBACK",
    "APP_TIMEZONE",
]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    for name in OCR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    settings_module.reset_settings_state()
    yield
    settings_module.reset_settings_state()

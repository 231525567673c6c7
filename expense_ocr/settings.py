"""Application settings management for the receipt OCR service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_OCR_SPACE_URL = "https://api.ocr.space/parse/image"
SUPPORTED_ENGINES = ("ocrspace", "local")
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    ocr_engine: str = "ocrspace"
    ocr_space_api_key: Optional[str] = None
    ocr_space_url: str = DEFAULT_OCR_SPACE_URL
    ocr_language: str = "eng"
    ocr_timeout: int = 30
    ocr_local_fallback: bool = False
    timezone: Optional[str] = None

    @staticmethod
    def _optional_env(name: str) -> Optional[str]:
        value = os.getenv(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    @classmethod
    def load(cls) -> "Settings":
        _ensure_env_file_loaded()

        ocr_engine = (cls._optional_env("OCR_ENGINE") or "ocrspace").lower()
        if ocr_engine not in SUPPORTED_ENGINES:
            raise RuntimeError(f"OCR_ENGINE must be one of {', '.join(SUPPORTED_ENGINES)}")

        ocr_space_url = (cls._optional_env("OCR_SPACE_URL") or DEFAULT_OCR_SPACE_URL).rstrip("/")
        if not ocr_space_url.startswith("https://"):
            raise RuntimeError("OCR_SPACE_URL must start with https://")

        raw_timeout = cls._optional_env("OCR_TIMEOUT") or "30"
        try:
            ocr_timeout = int(raw_timeout)
        except ValueError as exc:
            raise RuntimeError("OCR_TIMEOUT must be an integer number of seconds") from exc
        if ocr_timeout <= 0:
            raise RuntimeError("OCR_TIMEOUT must be positive")

        timezone = cls._optional_env("APP_TIMEZONE")
        if timezone:
            try:
                ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise RuntimeError(f"APP_TIMEZONE {timezone!r} is not a known timezone") from exc

        fallback = (cls._optional_env("OCR_LOCAL_FALLBACK") or "").lower() in _TRUE_VALUES

        return cls(
            ocr_engine=ocr_engine,
            ocr_space_api_key=cls._optional_env("OCR_SPACE_API_KEY"),
            ocr_space_url=ocr_space_url,
            ocr_language=cls._optional_env("OCR_LANGUAGE") or "eng",
            ocr_timeout=ocr_timeout,
            ocr_local_fallback=fallback,
            timezone=timezone,
        )

    def now(self) -> datetime:
        """Current time, in ``APP_TIMEZONE`` when configured."""

        if self.timezone:
            return datetime.now(ZoneInfo(self.timezone))
        return datetime.now()


@lru_cache()
def get_settings() -> Settings:
    return Settings.load()


def reset_settings_state() -> None:
    """Reset cached settings and environment file state (for tests)."""
    global _ENV_FILE_LOADED
    _ENV_FILE_LOADED = False
    get_settings.cache_clear()


_ENV_FILE_LOADED = False


def _ensure_env_file_loaded() -> None:
    global _ENV_FILE_LOADED
    if _ENV_FILE_LOADED:
        return
    candidates = [Path.cwd() / ".env", Path(__file__).resolve().parent.parent / ".env"]
    loaded = False
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            loaded = True
    if not loaded:
        load_dotenv(override=False)
    _ENV_FILE_LOADED = True


__all__ = ["Settings", "get_settings", "reset_settings_state"]

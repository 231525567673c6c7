from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict

import pytest
import requests

from expense_ocr import ocr_extract
from expense_ocr.settings import Settings

BASE_SETTINGS = Settings(ocr_engine="ocrspace", ocr_space_api_key="key-123", ocr_language="eng")


class FakeResponse:
    def __init__(self, payload: Any = None, *, status_error: bool = False, invalid_json: bool = False) -> None:
        self._payload = payload
        self._status_error = status_error
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self._status_error:
            raise requests.HTTPError("503 Server Error")

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


@pytest.fixture
def fake_post(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    captured: Dict[str, Any] = {"response": FakeResponse({"ParsedResults": [{"ParsedText": "Total: $9.99"}]})}

    def post(url: str, **kwargs: Any) -> FakeResponse:
        captured["url"] = url
        captured.update(kwargs)
        return captured["response"]

    monkeypatch.setattr(ocr_extract.requests, "post", post)
    return captured


def test_ocr_space_posts_image(fake_post: Dict[str, Any]) -> None:
    result = ocr_extract.extract_text(b"png-bytes", "receipt.png", settings=BASE_SETTINGS)

    assert result == ocr_extract.OCRText(text="Total: $9.99", engine="ocrspace")
    assert fake_post["url"] == "https://api.ocr.space/parse/image"
    assert fake_post["data"]["apikey"] == "key-123"
    assert fake_post["data"]["OCREngine"] == "2"
    assert fake_post["data"]["language"] == "eng"
    assert fake_post["files"] == {"file": ("receipt.png", b"png-bytes")}
    assert fake_post["timeout"] == 30


def test_ocr_space_without_results_returns_empty_text(fake_post: Dict[str, Any]) -> None:
    fake_post["response"] = FakeResponse({"ParsedResults": [], "OCRExitCode": 1})

    assert ocr_extract.extract_text(b"img", settings=BASE_SETTINGS).text == ""


def test_ocr_space_reports_processing_errors(fake_post: Dict[str, Any]) -> None:
    fake_post["response"] = FakeResponse(
        {"IsErroredOnProcessing": True, "ErrorMessage": ["File failed validation", "Bad image"]}
    )

    with pytest.raises(ocr_extract.OCRServiceError) as excinfo:
        ocr_extract.extract_text(b"img", settings=BASE_SETTINGS)

    assert "File failed validation; Bad image" in str(excinfo.value)


def test_ocr_space_http_error(fake_post: Dict[str, Any]) -> None:
    fake_post["response"] = FakeResponse(status_error=True)

    with pytest.raises(ocr_extract.OCRServiceError):
        ocr_extract.extract_text(b"img", settings=BASE_SETTINGS)


def test_ocr_space_invalid_json(fake_post: Dict[str, Any]) -> None:
    fake_post["response"] = FakeResponse(invalid_json=True)

    with pytest.raises(ocr_extract.OCRDecodeError):
        ocr_extract.extract_text(b"img", settings=BASE_SETTINGS)


def test_ocr_space_requires_api_key() -> None:
    with pytest.raises(ocr_extract.OCRConfigurationError):
        ocr_extract.extract_text(b"img", settings=replace(BASE_SETTINGS, ocr_space_api_key=None))


def test_ocr_space_falls_back_to_local(monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*_: Any, **__: Any) -> FakeResponse:
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(ocr_extract.requests, "post", boom)

    calls: Dict[str, int] = {"local": 0}

    def fake_local(_: bytes, __: Settings) -> str:
        calls["local"] += 1
        return "fallback"

    monkeypatch.setattr(ocr_extract, "_ocr_local", fake_local)

    result = ocr_extract.extract_text(b"img", settings=replace(BASE_SETTINGS, ocr_local_fallback=True))

    assert result == ocr_extract.OCRText(text="fallback", engine="local")
    assert calls["local"] == 1


def test_ocr_space_failure_without_fallback_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*_: Any, **__: Any) -> FakeResponse:
        raise requests.Timeout("slow")

    monkeypatch.setattr(ocr_extract.requests, "post", boom)
    monkeypatch.setattr(ocr_extract, "_ocr_local", lambda *_: pytest.fail("local engine must not run"))

    with pytest.raises(ocr_extract.OCRServiceError):
        ocr_extract.extract_text(b"img", settings=BASE_SETTINGS)


def test_unknown_engine_is_a_configuration_error() -> None:
    with pytest.raises(ocr_extract.OCRConfigurationError):
        ocr_extract.extract_text(b"img", settings=replace(BASE_SETTINGS, ocr_engine="cloud"))


def test_local_engine_uses_tesseract(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: Dict[str, Any] = {}

    class FakeImage:
        mode = "P"

        def load(self) -> None:
            captured["loaded"] = True

        def convert(self, mode: str) -> "FakeImage":
            captured["converted_to"] = mode
            self.mode = mode
            return self

    class FakeImageModule:
        @staticmethod
        def open(_: Any) -> FakeImage:
            return FakeImage()

    class FakePytesseract:
        TesseractError = RuntimeError
        TesseractNotFoundError = OSError

        @staticmethod
        def image_to_string(image: FakeImage, lang: str) -> str:
            captured["lang"] = lang
            captured["image_mode"] = image.mode
            return "Corner Cafe\nTotal $4.10"

    monkeypatch.setattr(ocr_extract, "Image", FakeImageModule)
    monkeypatch.setattr(ocr_extract, "pytesseract", FakePytesseract)

    result = ocr_extract.extract_text(b"gif-bytes", settings=replace(BASE_SETTINGS, ocr_engine="local", ocr_language="deu"))

    assert result == ocr_extract.OCRText(text="Corner Cafe\nTotal $4.10", engine="local")
    assert captured == {"loaded": True, "converted_to": "RGB", "image_mode": "RGB", "lang": "deu"}


def test_local_engine_reports_tesseract_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    class FakeImage:
        def load(self) -> None:
            pass

        def convert(self, mode: str) -> "FakeImage":  # noqa: ARG002
            return self

    class FakeImageModule:
        @staticmethod
        def open(_: Any) -> FakeImage:
            return FakeImage()

    class FakeTesseractError(Exception):
        pass

    class FakeTesseractNotFoundError(OSError):
        pass

    class FakePytesseract:
        TesseractError = FakeTesseractError
        TesseractNotFoundError = FakeTesseractNotFoundError

        @staticmethod
        def image_to_string(_: Any, lang: str) -> str:  # noqa: ARG004
            raise FakeTesseractNotFoundError("tesseract is not installed")

    monkeypatch.setattr(ocr_extract, "Image", FakeImageModule)
    monkeypatch.setattr(ocr_extract, "pytesseract", FakePytesseract)

    with pytest.raises(ocr_extract.OCRServiceError) as excinfo:
        ocr_extract._ocr_local(b"fake", BASE_SETTINGS)

    assert "tesseract_not_found" in str(excinfo.value)


def test_local_engine_rejects_invalid_images() -> None:
    with pytest.raises(ocr_extract.OCRDecodeError) as excinfo:
        ocr_extract._ocr_local(b"definitely not an image", BASE_SETTINGS)

    assert "unsupported_image_format" in str(excinfo.value)

"""Fixtures for F4 tests - OCR client and Web API."""

from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from eyelevel.config.app_config import OcrConfig
from eyelevel.db.kv_store import MemoryKeyValueStore
from eyelevel.ocr.client import OcrClient
from eyelevel.web.api import create_app
from eyelevel.web.services import reset_services

OCR_ENDPOINT = "https://ocr.test/parse/image"


def _ocr_body(text: str) -> dict:
    return {
        "ParsedResults": [{"ParsedText": text, "FileParseExitCode": 1}],
        "OCRExitCode": 1,
        "IsErroredOnProcessing": False,
    }


@pytest.fixture
def ocr_body():
    """Factory for successful OCR.space response bodies."""
    return _ocr_body


@pytest.fixture(autouse=True)
def _reset_services():
    yield
    reset_services()


@pytest.fixture
def ocr_config(monkeypatch) -> OcrConfig:
    monkeypatch.setenv("EYELEVEL_TEST_OCR_KEY", "secret-key")
    return OcrConfig(endpoint=OCR_ENDPOINT, api_key_env="EYELEVEL_TEST_OCR_KEY")


@pytest.fixture
def ocr_requests() -> list[dict]:
    """Form fields of every request seen by the fake OCR service."""
    return []


@pytest.fixture
def make_ocr_client(ocr_config, ocr_requests):
    """Build an OcrClient whose transport answers with `handler`."""

    def _make(handler) -> OcrClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            ocr_requests.append(form)
            return handler(request)

        http_client = httpx.Client(transport=httpx.MockTransport(recording_handler))
        return OcrClient(config=ocr_config, http_client=http_client)

    return _make


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def client(kv, make_ocr_client) -> TestClient:
    """Test client over an in-memory store and an OCR service reading 'Level B, Book 12'."""
    ocr_client = make_ocr_client(lambda request: httpx.Response(200, json=_ocr_body("Level B, Book 12")))
    app = create_app(kv_store=kv, ocr_client=ocr_client)
    return TestClient(app)

"""Tests for the OCR service client (F4)."""

import httpx
import pytest
from eyelevel.core.extraction import ExtractionResult
from eyelevel.ocr.client import (
    OcrConnectionError,
    OcrProcessingError,
    OcrResponseError,
    analyze,
)


class TestParseImage:
    """Tests for OcrClient.parse_image."""

    def test_returns_parsed_text(self, make_ocr_client, ocr_body):
        client = make_ocr_client(lambda r: httpx.Response(200, json=ocr_body("Level C\nBook 3")))
        assert client.parse_image("aGVsbG8=") == "Level C\nBook 3"

    def test_request_form_fields(self, make_ocr_client, ocr_requests, ocr_body):
        client = make_ocr_client(lambda r: httpx.Response(200, json=ocr_body("")))

        client.parse_image("aGVsbG8=")

        assert ocr_requests == [
            {
                "apikey": "secret-key",
                "base64Image": "data:image/jpeg;base64,aGVsbG8=",
                "OCREngine": "2",
                "isTable": "true",
            }
        ]

    def test_posts_to_configured_endpoint(self, make_ocr_client, ocr_body, ocr_config):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(200, json=ocr_body("x"))

        make_ocr_client(handler).parse_image("aGVsbG8=")

        assert seen == [("POST", ocr_config.endpoint)]

    def test_processing_error_carries_service_message(self, make_ocr_client):
        body = {"IsErroredOnProcessing": True, "ErrorMessage": ["Unable to recognize the file type"]}
        client = make_ocr_client(lambda r: httpx.Response(200, json=body))

        with pytest.raises(OcrProcessingError) as exc_info:
            client.parse_image("aGVsbG8=")

        assert exc_info.value.service_message == "Unable to recognize the file type"

    def test_processing_error_string_message(self, make_ocr_client):
        body = {"IsErroredOnProcessing": True, "ErrorMessage": "Timed out waiting for results"}
        client = make_ocr_client(lambda r: httpx.Response(200, json=body))

        with pytest.raises(OcrProcessingError, match="Timed out"):
            client.parse_image("aGVsbG8=")

    def test_http_error_status(self, make_ocr_client):
        client = make_ocr_client(lambda r: httpx.Response(403, text="Forbidden"))

        with pytest.raises(OcrResponseError):
            client.parse_image("aGVsbG8=")

    def test_transport_failure(self, make_ocr_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OcrConnectionError):
            make_ocr_client(handler).parse_image("aGVsbG8=")

    def test_invalid_json(self, make_ocr_client):
        client = make_ocr_client(lambda r: httpx.Response(200, text="<html>"))

        with pytest.raises(OcrResponseError):
            client.parse_image("aGVsbG8=")

    def test_missing_parsed_results(self, make_ocr_client):
        client = make_ocr_client(lambda r: httpx.Response(200, json={"ParsedResults": []}))

        with pytest.raises(OcrResponseError):
            client.parse_image("aGVsbG8=")

    @pytest.mark.parametrize("parsed_text", [42, {"text": "Level B"}, ["Level B"]])
    def test_non_text_parsed_result(self, make_ocr_client, parsed_text):
        body = {"ParsedResults": [{"ParsedText": parsed_text}], "IsErroredOnProcessing": False}
        client = make_ocr_client(lambda r: httpx.Response(200, json=body))

        with pytest.raises(OcrResponseError):
            client.parse_image("aGVsbG8=")

    def test_null_parsed_text_is_empty(self, make_ocr_client):
        body = {"ParsedResults": [{"ParsedText": None}], "IsErroredOnProcessing": False}
        client = make_ocr_client(lambda r: httpx.Response(200, json=body))

        assert client.parse_image("aGVsbG8=") == ""

    def test_single_request_no_retry(self, make_ocr_client, ocr_requests):
        client = make_ocr_client(lambda r: httpx.Response(500, text="boom"))

        with pytest.raises(OcrResponseError):
            client.parse_image("aGVsbG8=")

        assert len(ocr_requests) == 1


class TestAnalyze:
    """Tests for analyze()."""

    def test_analyze_extracts_fields(self, make_ocr_client, ocr_body):
        client = make_ocr_client(lambda r: httpx.Response(200, json=ocr_body("Level B, Book 12")))

        result = analyze("aGVsbG8=", client)

        assert result.raw_text == "Level B, Book 12"
        assert result.extracted == ExtractionResult(level="B", book="12")
        assert result.to_dict() == {
            "rawText": "Level B, Book 12",
            "extracted": {"level": "B", "book": "12"},
        }

    def test_analyze_no_match_is_not_an_error(self, make_ocr_client, ocr_body):
        client = make_ocr_client(lambda r: httpx.Response(200, json=ocr_body("random unrelated text")))

        result = analyze("aGVsbG8=", client)

        assert result.extracted.outcome == "none"

"""OCR service client.

Sends a base64-encoded workbook photo to an OCR.space compatible endpoint
and returns the recognized text. One request per call: no retries, no
streaming, no cancellation. The only timeout is the transport timeout.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from eyelevel.config.app_config import OcrConfig, load_app_config
from eyelevel.core.extraction import ExtractionResult, extract

logger = structlog.get_logger(__name__)

# Photos are sent as JPEG data URIs
DATA_URI_PREFIX = "data:image/jpeg;base64,"


class OcrServiceError(Exception):
    """Error during OCR service interaction."""

    pass


class OcrConnectionError(OcrServiceError):
    """Error reaching the OCR service."""

    pass


class OcrResponseError(OcrServiceError):
    """The OCR service answered with an unusable response."""

    pass


class OcrProcessingError(OcrServiceError):
    """The OCR service reported that it could not process the image."""

    def __init__(self, service_message: str):
        self.service_message = service_message
        super().__init__(service_message)


@dataclass
class AnalysisResult:
    """Recognized text plus the level/book candidates extracted from it."""

    raw_text: str
    extracted: ExtractionResult

    def to_dict(self) -> dict[str, Any]:
        """Convert to the /analyze response body."""
        return {"rawText": self.raw_text, "extracted": self.extracted.to_dict()}


def _service_message(result: dict[str, Any]) -> str:
    """OCR.space reports ErrorMessage as a string or a list of strings."""
    message = result.get("ErrorMessage") or "OCR processing failed"
    if isinstance(message, list):
        return " ".join(str(m) for m in message)
    return str(message)


class OcrClient:
    """Client for an OCR.space compatible parse endpoint."""

    def __init__(
        self,
        config: OcrConfig | None = None,
        http_client: httpx.Client | None = None,
    ):
        """Initialize OCR client.

        Args:
            config: OCR configuration (loads app config if not provided)
            http_client: Preconfigured httpx client (created if not provided)
        """
        if config is None:
            config = load_app_config().ocr

        self.config = config
        self._http = http_client or httpx.Client(timeout=config.timeout_seconds)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> OcrClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def parse_image(self, image_base64: str) -> str:
        """Recognize the text in a base64-encoded JPEG.

        Args:
            image_base64: Raw base64 payload (without data URI prefix)

        Returns:
            Parsed text of the first result

        Raises:
            OcrConnectionError: If the service cannot be reached
            OcrResponseError: If the response is not a usable OCR result
            OcrProcessingError: If the service reports a processing error
        """
        form = {
            "apikey": self.config.get_api_key() or "",
            "base64Image": f"{DATA_URI_PREFIX}{image_base64}",
            "OCREngine": self.config.engine,
            "isTable": "true" if self.config.is_table else "false",
        }

        start_time = time.time()
        try:
            response = self._http.post(self.config.endpoint, data=form)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("ocr.bad_status", status=e.response.status_code)
            raise OcrResponseError(
                f"OCR service answered HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("ocr.request_failed", endpoint=self.config.endpoint, error=str(e))
            raise OcrConnectionError(f"Could not reach OCR service: {e}") from e
        except ValueError as e:
            raise OcrResponseError("OCR service returned invalid JSON") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not isinstance(result, dict):
            raise OcrResponseError("OCR service returned an unexpected body")

        if result.get("IsErroredOnProcessing"):
            message = _service_message(result)
            logger.warning("ocr.processing_error", message=message, latency_ms=latency_ms)
            raise OcrProcessingError(message)

        try:
            parsed_text = result["ParsedResults"][0]["ParsedText"]
        except (KeyError, IndexError, TypeError) as e:
            raise OcrResponseError("OCR response has no parsed results") from e

        if parsed_text is None:
            parsed_text = ""
        if not isinstance(parsed_text, str):
            raise OcrResponseError("OCR response ParsedText is not text")

        logger.info("ocr.parsed", chars=len(parsed_text), latency_ms=latency_ms)
        return parsed_text


def analyze(image_base64: str, client: OcrClient) -> AnalysisResult:
    """Run OCR on an image and extract level/book candidates from the text."""
    raw_text = client.parse_image(image_base64)
    extracted = extract(raw_text)

    logger.info(
        "ocr.analyzed",
        outcome=extracted.outcome,
        level=extracted.level,
        book=extracted.book,
    )
    return AnalysisResult(raw_text=raw_text, extracted=extracted)

"""OCR service integration."""

from eyelevel.ocr.client import (
    AnalysisResult,
    OcrClient,
    OcrConnectionError,
    OcrProcessingError,
    OcrResponseError,
    OcrServiceError,
    analyze,
)

__all__ = [
    "AnalysisResult",
    "OcrClient",
    "OcrConnectionError",
    "OcrProcessingError",
    "OcrResponseError",
    "OcrServiceError",
    "analyze",
]

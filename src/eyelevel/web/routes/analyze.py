"""Photo analysis endpoint.

POST /analyze takes a base64 photo, runs OCR and returns the recognized
text with level/book candidates for the tutor to confirm.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from eyelevel.ocr.client import OcrProcessingError, OcrServiceError, analyze
from eyelevel.web.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    ExtractedFields,
)
from eyelevel.web.services import get_ocr_client

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["analyze"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def analyze_photo(request: AnalyzeRequest):
    """Recognize a workbook photo and extract level/book."""
    if not request.imageBase64:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "No image provided"},
        )

    try:
        result = analyze(request.imageBase64, get_ocr_client())
    except OcrProcessingError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.service_message},
        )
    except OcrServiceError as e:
        logger.error("analyze_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server Error"},
        )

    return AnalyzeResponse(
        rawText=result.raw_text,
        extracted=ExtractedFields(**result.extracted.to_dict()),
    )

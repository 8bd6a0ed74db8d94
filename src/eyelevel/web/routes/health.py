"""Liveness endpoint for the mobile client and deploy checks."""

from fastapi import APIRouter

from eyelevel.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse()

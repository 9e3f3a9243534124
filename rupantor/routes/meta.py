"""
Liveness routes.
"""

from __future__ import annotations

from fastapi import APIRouter

from rupantor.schemas import HealthResponse
from rupantor.utils import now_iso

router = APIRouter(tags=["meta"])


@router.get("/")
def root():
    return {
        "status": "running",
        "service": "rupantor-backend",
        "timestamp": now_iso(),
    }


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", timestamp=now_iso())

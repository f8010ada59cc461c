"""Root and health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict[str, str]:
    return {"message": "Welcome to Flux API", "status": "running"}


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic health check -- always returns quickly."""
    return {"status": "healthy", "timestamp": datetime.now(UTC).isoformat()}

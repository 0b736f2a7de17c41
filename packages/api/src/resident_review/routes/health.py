# This project was developed with assistance from AI tools.
"""Liveness endpoint."""

from fastapi import APIRouter

from .. import __version__
from ..core.config import settings

router = APIRouter()


@router.get("/")
async def health() -> dict[str, str]:
    """Process is up. Does not call the backend."""
    return {"status": "ok", "service": settings.APP_NAME, "version": __version__}

"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/config", status_code=status.HTTP_200_OK)
def health_config() -> dict:
    """Report the non-secret geocoder and optimizer settings in effect."""
    return {
        "geocoder": {
            "base_url": settings.geocoder_base_url,
            "country": settings.geocoder_country,
            "region": settings.geocoder_region,
            "delay_seconds": settings.geocoder_delay_seconds,
        },
        "optimizer": {
            "kmeans_max_iterations": settings.kmeans_max_iterations,
            "two_opt_max_passes": settings.two_opt_max_passes,
            "seeded": settings.default_random_seed is not None,
        },
    }

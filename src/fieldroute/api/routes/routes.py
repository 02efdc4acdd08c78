"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import DistributionRequest, DistributionResponse, OptimizationRequest, OptimizationResponse
from ...services.routing.service import distribute_request, optimize_request

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizationRequest) -> OptimizationResponse:
    try:
        return optimize_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}"
        ) from exc


@router.post("/distribute", response_model=DistributionResponse, status_code=status.HTTP_200_OK)
def distribute(payload: DistributionRequest) -> DistributionResponse:
    """Geocode orders lacking coordinates, then distribute all orders among the technicians.

    Geocoding honours the service rate limit, so large batches take roughly
    1.5 seconds per order without coordinates.
    """
    try:
        return distribute_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error distributing orders: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to distribute orders: {str(exc)}"
        ) from exc

"""Geocoding endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.geocoding import (
    GeocodeOrdersRequest,
    GeocodeOrdersResponse,
    GeocodeQueryRequest,
    GeocodeQueryResponse,
)
from ...services.geocoding.service import geocode_orders_request, geocode_query_request

router = APIRouter(prefix="/geocoding", tags=["geocoding"])


@router.post("/orders", response_model=GeocodeOrdersResponse, status_code=status.HTTP_200_OK)
def geocode_batch(payload: GeocodeOrdersRequest) -> GeocodeOrdersResponse:
    """Resolve coordinates for orders that lack them, one lookup at a time."""
    try:
        return geocode_orders_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error geocoding orders: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to geocode orders: {str(exc)}"
        ) from exc


@router.post("/query", response_model=GeocodeQueryResponse, status_code=status.HTTP_200_OK)
def geocode_single(payload: GeocodeQueryRequest) -> GeocodeQueryResponse:
    try:
        return geocode_query_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error geocoding query: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to geocode query: {str(exc)}"
        ) from exc

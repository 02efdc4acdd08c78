"""Order import endpoints."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from ...data.orders_repository import SUPPORTED_SUFFIXES, read_orders
from ...schemas.orders import ImportWarningModel, OrderImportResponse, OrderModel
from ...services.geocoding.service import apply_geocode_results, geocode_with_shared_client

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/import", response_model=OrderImportResponse, status_code=status.HTTP_200_OK)
async def import_orders(
    file: UploadFile = File(...),
    geocode_missing: bool = Form(False),
) -> OrderImportResponse:
    """Parse a work-order spreadsheet into orders ready for geocoding and routing.

    With ``geocode_missing`` set, rows without usable coordinates are geocoded
    before the response is returned (about 1.5 seconds per row).
    """
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required.")

    suffix = Path(file.filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail="Only .csv and .xlsx files are supported.")

    try:
        result = read_orders(await file.read(), suffix)
    except (ValueError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Could not read order file: {exc}") from exc

    orders = result.orders
    geocoded = {}
    if geocode_missing:
        geocoded = await run_in_threadpool(geocode_with_shared_client, orders)
        orders = apply_geocode_results(orders, geocoded)

    return OrderImportResponse(
        file_name=file.filename,
        total=len(orders),
        with_coordinates=sum(1 for order in orders if order.has_valid_location),
        geocoded_count=len(geocoded),
        orders=[OrderModel.from_domain(order) for order in orders],
        warnings=[ImportWarningModel(row=warning.row, message=warning.message) for warning in result.warnings],
    )

"""Batch geocoding of service orders."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional, Sequence

from ...models.domain import GeoPoint, Order
from ...schemas.geocoding import (
    GeocodeOrdersRequest,
    GeocodeOrdersResponse,
    GeocodeQueryRequest,
    GeocodeQueryResponse,
    GeocodeResultModel,
)
from .address import build_address_query, build_alternative_queries, has_address
from .nominatim_client import NominatimClient, geocoder_lock, get_geocoder

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    order_id: str
    point: GeoPoint
    query: str


def candidate_queries(order: Order) -> list[str]:
    """Queries for ``order`` in the order they are tried; empty when it has no address."""
    if not has_address(order):
        return []
    primary = build_address_query(order)
    return [query for query in (primary, *build_alternative_queries(order)) if query]


def geocode_with_fallback(
    order: Order,
    client: NominatimClient,
    *,
    cancel_event: threading.Event | None = None,
) -> Optional[GeocodeResult]:
    """Try the full address, then each coarser variant, stopping at the first match."""

    for query in candidate_queries(order):
        if cancel_event is not None and cancel_event.is_set():
            return None
        point = client.geocode_address(query, cancel_event=cancel_event)
        if point is not None:
            return GeocodeResult(order_id=order.id, point=point, query=query)
    return None


def geocode_orders(
    orders: Sequence[Order],
    on_progress: ProgressCallback | None = None,
    *,
    client: NominatimClient | None = None,
    cancel_event: threading.Event | None = None,
) -> dict[str, GeoPoint]:
    """Geocode every order that lacks valid coordinates, one request at a time.

    ``on_progress(current, total, query)`` is called before each order with a
    1-based position. Orders that cannot be resolved are left out of the
    returned mapping. Setting ``cancel_event`` stops the batch at the next
    order boundary (or during the rate-limit wait); results gathered so far
    are returned.
    """

    pending = [order for order in orders if not order.has_valid_location]
    logger.info(f"Geocoding {len(pending)} orders of {len(orders)} total")

    results: dict[str, GeoPoint] = {}
    if not pending:
        return results

    owns_client = client is None
    client = client or NominatimClient()
    try:
        for index, order in enumerate(pending, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Geocoding cancelled after {index - 1}/{len(pending)} orders")
                break

            if on_progress is not None:
                on_progress(index, len(pending), build_address_query(order))

            result = geocode_with_fallback(order, client, cancel_event=cancel_event)
            if result is not None:
                results[order.id] = result.point
                logger.info(f"Geocoded {order.id}: {result.point.latitude}, {result.point.longitude}")
            else:
                logger.warning(f"Failed to geocode order {order.id}: {build_address_query(order)}")
    finally:
        if owns_client:
            client.close()

    return results


def apply_geocode_results(orders: Sequence[Order], results: Mapping[str, GeoPoint]) -> list[Order]:
    """Return copies of ``orders`` with geocoded coordinates attached."""
    return [replace(order, location=results[order.id]) if order.id in results else order for order in orders]


def _log_progress(current: int, total: int, query: str) -> None:
    logger.info(f"Geocoding {current}/{total}: {query}")


def geocode_with_shared_client(orders: Sequence[Order]) -> dict[str, GeoPoint]:
    """Batch geocode through the process-wide client while holding its lock."""
    with geocoder_lock:
        return geocode_orders(orders, _log_progress, client=get_geocoder())


def geocode_orders_request(payload: GeocodeOrdersRequest) -> GeocodeOrdersResponse:
    orders = [model.to_domain() for model in payload.orders]
    pending = [order for order in orders if not order.has_valid_location]

    results = geocode_with_shared_client(orders)

    return GeocodeOrdersResponse(
        requested=len(pending),
        results=[
            GeocodeResultModel(order_id=order_id, latitude=point.latitude, longitude=point.longitude)
            for order_id, point in results.items()
        ],
        failed_order_ids=[order.id for order in pending if order.id not in results],
    )


def geocode_query_request(payload: GeocodeQueryRequest) -> GeocodeQueryResponse:
    with geocoder_lock:
        client = get_geocoder()
        if payload.order is not None:
            order = payload.order.to_domain()
            queries = candidate_queries(order)
            if not queries:
                raise ValueError(f"Order '{order.id}' has no address fields to geocode.")
            result = geocode_with_fallback(order, client)
            if result is None:
                return GeocodeQueryResponse(queries=queries)
            return GeocodeQueryResponse(
                queries=queries,
                matched_query=result.query,
                latitude=result.point.latitude,
                longitude=result.point.longitude,
            )

        query = payload.query.strip()
        point = client.geocode_address(query)

    if point is None:
        return GeocodeQueryResponse(queries=[query])
    return GeocodeQueryResponse(queries=[query], matched_query=query, latitude=point.latitude, longitude=point.longitude)

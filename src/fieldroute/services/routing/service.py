"""Routing orchestration service."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...config import settings
from ...models.domain import Order
from ...schemas.orders import OrderModel
from ...schemas.routing import (
    DistributionRequest,
    DistributionResponse,
    OptimizationRequest,
    OptimizationResponse,
    TechnicianRouteModel,
)
from ..geocoding.nominatim_client import NominatimClient, geocoder_lock, get_geocoder
from ..geocoding.service import ProgressCallback, apply_geocode_results, geocode_orders
from .clustering import RandomSource, kmeans_cluster
from .models import DistributionOutcome, OptimizationResult, TechnicianRoute
from .tour import nearest_neighbor_sort, two_opt_optimize

logger = logging.getLogger(__name__)

STRATEGY_OPTIMIZED = "optimized"
STRATEGY_LATITUDE_BANDS = "latitude_bands"


def split_orders_by_location(orders: Sequence[Order]) -> tuple[list[Order], list[Order]]:
    """Separate orders that can be routed from those lacking valid coordinates."""
    with_coords = [order for order in orders if order.has_valid_location]
    unassigned = [order for order in orders if not order.has_valid_location]
    return with_coords, unassigned


def optimize_routes(
    orders: Sequence[Order],
    technician_ids: Sequence[str],
    *,
    rng: RandomSource = None,
) -> OptimizationResult:
    """Cluster orders per technician, then sequence and improve each route.

    Orders without valid coordinates are returned as unassigned. When there is
    nothing to route (no technicians or no located orders) every order is
    unassigned and no routes are produced.
    """

    logger.info(f"Optimizing {len(orders)} orders for {len(technician_ids)} technicians")

    with_coords, unassigned = split_orders_by_location(orders)
    if not with_coords or not technician_ids:
        return OptimizationResult(routes=[], unassigned_orders=list(orders), total_optimized=0)

    clusters = kmeans_cluster(with_coords, len(technician_ids), rng=rng)

    routes: list[TechnicianRoute] = []
    for index, technician_id in enumerate(technician_ids):
        # k-means can leave clusters empty, and k >= n yields fewer clusters than technicians.
        cluster = clusters[index] if index < len(clusters) else []
        if not cluster:
            routes.append(TechnicianRoute(technician_id=technician_id, orders=[]))
            continue

        initial_route = nearest_neighbor_sort(cluster)
        optimized = two_opt_optimize(initial_route)
        logger.info(f"Technician {technician_id}: {len(optimized)} orders")
        routes.append(TechnicianRoute(technician_id=technician_id, orders=optimized))

    total_optimized = sum(len(route.orders) for route in routes)
    return OptimizationResult(routes=routes, unassigned_orders=unassigned, total_optimized=total_optimized)


def distribute_by_latitude(orders: Sequence[Order], technician_ids: Sequence[str]) -> OptimizationResult:
    """Split located orders north to south into equal contiguous bands, one per technician."""

    with_coords, unassigned = split_orders_by_location(orders)
    if not with_coords or not technician_ids:
        return OptimizationResult(routes=[], unassigned_orders=list(orders), total_optimized=0)

    ordered = sorted(with_coords, key=lambda order: order.location.latitude, reverse=True)
    per_technician = math.ceil(len(ordered) / len(technician_ids))

    routes = [TechnicianRoute(technician_id=technician_id, orders=[]) for technician_id in technician_ids]
    for index, order in enumerate(ordered):
        band = min(index // per_technician, len(technician_ids) - 1)
        routes[band].orders.append(order)

    return OptimizationResult(routes=routes, unassigned_orders=unassigned, total_optimized=len(ordered))


def distribute_orders(
    orders: Sequence[Order],
    technician_ids: Sequence[str],
    *,
    geocode_missing: bool = True,
    strategy: str = STRATEGY_OPTIMIZED,
    client: NominatimClient | None = None,
    on_progress: ProgressCallback | None = None,
    rng: RandomSource = None,
) -> DistributionOutcome:
    """Geocode orders lacking coordinates (optionally) and distribute them among technicians."""

    if strategy not in (STRATEGY_OPTIMIZED, STRATEGY_LATITUDE_BANDS):
        raise ValueError(f"Unknown distribution strategy '{strategy}'.")

    geocoded = {}
    working_orders = list(orders)
    if geocode_missing and technician_ids and any(not order.has_valid_location for order in working_orders):
        geocoded = geocode_orders(working_orders, on_progress, client=client)
        working_orders = apply_geocode_results(working_orders, geocoded)

    if strategy == STRATEGY_LATITUDE_BANDS:
        result = distribute_by_latitude(working_orders, technician_ids)
    else:
        result = optimize_routes(working_orders, technician_ids, rng=rng)

    if result.unassigned_orders:
        logger.warning(f"{len(result.unassigned_orders)} orders without coordinates were not distributed")
    return DistributionOutcome(result=result, geocoded=geocoded, strategy=strategy)


def _resolve_seed(seed: int | None) -> int | None:
    return seed if seed is not None else settings.default_random_seed


def _route_models(result: OptimizationResult) -> list[TechnicianRouteModel]:
    return [
        TechnicianRouteModel(
            technician_id=route.technician_id,
            order_count=len(route.orders),
            distance_km=round(route.distance_km, 3),
            orders=[OrderModel.from_domain(order) for order in route.orders],
        )
        for route in result.routes
    ]


def _log_progress(current: int, total: int, query: str) -> None:
    logger.info(f"Geocoding {current}/{total}: {query}")


def optimize_request(payload: OptimizationRequest) -> OptimizationResponse:
    orders = [model.to_domain() for model in payload.orders]
    result = optimize_routes(orders, payload.technician_ids, rng=_resolve_seed(payload.seed))
    return OptimizationResponse(
        routes=_route_models(result),
        unassigned_orders=[OrderModel.from_domain(order) for order in result.unassigned_orders],
        total_optimized=result.total_optimized,
        total_distance_km=round(sum(route.distance_km for route in result.routes), 3),
    )


def distribute_request(payload: DistributionRequest) -> DistributionResponse:
    orders = [model.to_domain() for model in payload.orders]
    with geocoder_lock:
        outcome = distribute_orders(
            orders,
            payload.technician_ids,
            geocode_missing=payload.geocode_missing,
            strategy=payload.strategy,
            client=get_geocoder(),
            on_progress=_log_progress,
            rng=_resolve_seed(payload.seed),
        )
    result = outcome.result
    return DistributionResponse(
        strategy=outcome.strategy,
        routes=_route_models(result),
        unassigned_orders=[OrderModel.from_domain(order) for order in result.unassigned_orders],
        total_optimized=result.total_optimized,
        total_distance_km=round(sum(route.distance_km for route in result.routes), 3),
        geocoded_count=len(outcome.geocoded),
    )

"""Visit sequencing within a technician's cluster.

Construction uses a greedy nearest-neighbour sweep starting from the
northernmost order; improvement uses first-improvement 2-opt on the open path
(there is no edge from the last stop back to the first).
"""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...models.domain import Order
from ..geospatial import haversine_km


def _distance(a: Order, b: Order) -> float:
    return haversine_km(a.location.latitude, a.location.longitude, b.location.latitude, b.location.longitude)


def calculate_route_distance(orders: Sequence[Order]) -> float:
    """Total haversine length in km of the path visiting ``orders`` in sequence."""

    if len(orders) <= 1:
        return 0.0
    return sum(_distance(orders[i], orders[i + 1]) for i in range(len(orders) - 1))


def nearest_neighbor_sort(orders: Sequence[Order]) -> list[Order]:
    """Order stops greedily, always visiting the closest remaining order next."""

    if len(orders) <= 1:
        return list(orders)

    remaining = list(orders)
    start_index = 0
    for index, order in enumerate(remaining):
        if order.location.latitude > remaining[start_index].location.latitude:
            start_index = index
    sorted_orders = [remaining.pop(start_index)]

    while remaining:
        last = sorted_orders[-1]
        nearest_index = 0
        nearest_distance = float("inf")
        for index, candidate in enumerate(remaining):
            distance = _distance(last, candidate)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index
        sorted_orders.append(remaining.pop(nearest_index))

    return sorted_orders


def two_opt_optimize(orders: Sequence[Order], *, max_passes: int | None = None) -> list[Order]:
    """Shorten a route by reversing segments whenever that removes length.

    Routes of three stops or fewer cannot be improved by this move and are
    returned unchanged.
    """

    if len(orders) <= 3:
        return list(orders)

    max_passes = max_passes if max_passes is not None else settings.two_opt_max_passes
    route = list(orders)
    size = len(route)
    improved = True
    passes = 0

    while improved and passes < max_passes:
        improved = False
        for i in range(size - 2):
            for j in range(i + 2, size - 1):
                current = _distance(route[i], route[i + 1]) + _distance(route[j], route[j + 1])
                swapped = _distance(route[i], route[j]) + _distance(route[i + 1], route[j + 1])
                if swapped < current:
                    route[i + 1 : j + 1] = route[i + 1 : j + 1][::-1]
                    improved = True
        passes += 1

    return route

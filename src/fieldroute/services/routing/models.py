"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ...models.domain import Order
from .tour import calculate_route_distance


@dataclass(slots=True)
class TechnicianRoute:
    technician_id: str
    orders: List[Order] = field(default_factory=list)

    @property
    def distance_km(self) -> float:
        return calculate_route_distance(self.orders)


@dataclass(slots=True)
class OptimizationResult:
    routes: List[TechnicianRoute]
    unassigned_orders: List[Order]
    total_optimized: int


@dataclass(slots=True)
class DistributionOutcome:
    result: OptimizationResult
    geocoded: dict = field(default_factory=dict)
    strategy: str = "optimized"

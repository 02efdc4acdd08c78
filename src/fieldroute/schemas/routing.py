"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .orders import OrderModel


class OptimizationRequest(BaseModel):
    orders: List[OrderModel]
    technician_ids: List[str] = Field(..., description="Technicians to distribute orders to, in priority order.")
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the clustering random source. Omit for a fresh (non-reproducible) run.",
    )

    @field_validator("technician_ids")
    @classmethod
    def _unique_technicians(cls, value: List[str]) -> List[str]:
        cleaned = [technician_id.strip() for technician_id in value]
        if any(not technician_id for technician_id in cleaned):
            raise ValueError("technician_ids must not contain blank identifiers")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("technician_ids must be unique")
        return cleaned


class DistributionRequest(OptimizationRequest):
    geocode_missing: bool = Field(
        default=True,
        description="Geocode orders lacking coordinates before distributing. Slow: one lookup per ~1.5s.",
    )
    strategy: Literal["optimized", "latitude_bands"] = "optimized"


class TechnicianRouteModel(BaseModel):
    technician_id: str
    order_count: int
    distance_km: float
    orders: List[OrderModel]


class OptimizationResponse(BaseModel):
    routes: List[TechnicianRouteModel]
    unassigned_orders: List[OrderModel]
    total_optimized: int
    total_distance_km: float


class DistributionResponse(OptimizationResponse):
    strategy: str
    geocoded_count: int

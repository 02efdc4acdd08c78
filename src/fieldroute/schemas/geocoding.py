"""Geocoding request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .orders import OrderModel


class GeocodeOrdersRequest(BaseModel):
    orders: List[OrderModel]


class GeocodeResultModel(BaseModel):
    order_id: str
    latitude: float
    longitude: float


class GeocodeOrdersResponse(BaseModel):
    requested: int = Field(..., description="Orders that lacked valid coordinates and were looked up.")
    results: List[GeocodeResultModel]
    failed_order_ids: List[str]


class GeocodeQueryRequest(BaseModel):
    order: Optional[OrderModel] = None
    query: Optional[str] = None

    @model_validator(mode="after")
    def _require_order_or_query(self) -> "GeocodeQueryRequest":
        if self.order is None and not (self.query and self.query.strip()):
            raise ValueError("Either 'order' or a non-empty 'query' is required.")
        return self


class GeocodeQueryResponse(BaseModel):
    queries: List[str]
    matched_query: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

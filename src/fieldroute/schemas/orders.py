"""Service order schemas shared by the API endpoints."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import GeoPoint, Order


class OrderModel(BaseModel):
    id: str = Field(..., min_length=1)
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    municipality: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    extra: dict = Field(default_factory=dict, description="Source fields carried through untouched.")

    @field_validator("id", "number", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def to_domain(self) -> Order:
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = GeoPoint(latitude=self.latitude, longitude=self.longitude)
        return Order(
            id=self.id,
            street=self.street,
            number=self.number,
            neighborhood=self.neighborhood,
            municipality=self.municipality,
            location=location,
            raw=dict(self.extra),
        )

    @classmethod
    def from_domain(cls, order: Order) -> "OrderModel":
        return cls(
            id=order.id,
            street=order.street,
            number=order.number,
            neighborhood=order.neighborhood,
            municipality=order.municipality,
            latitude=order.location.latitude if order.location else None,
            longitude=order.location.longitude if order.location else None,
            extra=dict(order.raw),
        )


class ImportWarningModel(BaseModel):
    row: int
    message: str


class OrderImportResponse(BaseModel):
    file_name: str
    total: int
    with_coordinates: int
    geocoded_count: int = 0
    orders: List[OrderModel]
    warnings: List[ImportWarningModel]

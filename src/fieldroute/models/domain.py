"""Domain models for service orders and coordinates."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS84 coordinate in decimal degrees."""

    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        # (0, 0) is what upstream spreadsheets and tables store for "not geocoded".
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return False
        return not (self.latitude == 0 and self.longitude == 0)


@dataclass(slots=True)
class Order:
    """A service order to be visited by a technician."""

    id: str
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    municipality: Optional[str] = None
    location: Optional[GeoPoint] = None
    raw: dict = field(default_factory=dict)

    @property
    def has_valid_location(self) -> bool:
        return self.location is not None and self.location.is_valid

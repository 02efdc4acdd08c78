"""Address geocoding services."""

from .address import build_address_query, build_alternative_queries, normalize_address
from .nominatim_client import NominatimClient, RateLimiter
from .service import GeocodeResult, apply_geocode_results, geocode_orders, geocode_with_fallback

__all__ = [
    "normalize_address",
    "build_address_query",
    "build_alternative_queries",
    "NominatimClient",
    "RateLimiter",
    "GeocodeResult",
    "geocode_with_fallback",
    "geocode_orders",
    "apply_geocode_results",
]

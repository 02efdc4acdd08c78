"""Route group exports."""

from . import geocoding, health, orders, routes

__all__ = ["geocoding", "health", "orders", "routes"]

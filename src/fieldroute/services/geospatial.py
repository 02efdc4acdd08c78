"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_matrix_km(
    lats: np.ndarray,
    lons: np.ndarray,
    centre_lats: np.ndarray,
    centre_lons: np.ndarray,
) -> np.ndarray:
    """Vectorized haversine distance between every point and every centre.

    Returns an array of shape ``(len(lats), len(centre_lats))`` in kilometres.
    """

    phi1 = np.radians(lats)[:, np.newaxis]
    phi2 = np.radians(centre_lats)[np.newaxis, :]
    d_phi = phi2 - phi1
    d_lambda = np.radians(centre_lons)[np.newaxis, :] - np.radians(lons)[:, np.newaxis]

    a = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_centroid(points: Sequence[GeoPoint]) -> GeoPoint:
    """Arithmetic mean of latitudes and longitudes.

    An empty input yields ``GeoPoint(0.0, 0.0)``, which is not a real location.
    """

    if not points:
        return GeoPoint(0.0, 0.0)
    lat = sum(point.latitude for point in points) / len(points)
    lon = sum(point.longitude for point in points) / len(points)
    return GeoPoint(lat, lon)

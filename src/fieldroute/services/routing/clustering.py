"""Geographic k-means clustering of service orders, one cluster per technician."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ...config import settings
from ...models.domain import Order
from ..geospatial import haversine_matrix_km

logger = logging.getLogger(__name__)

RandomSource = np.random.Generator | int | None


def kmeans_cluster(
    orders: Sequence[Order],
    k: int,
    *,
    max_iterations: int | None = None,
    rng: RandomSource = None,
) -> list[list[Order]]:
    """Partition geocoded orders into ``k`` geographically compact groups.

    Distances are great-circle (haversine) distances between each order and
    the cluster centroids. Centroids are seeded from ``k`` distinct orders drawn
    from ``rng``, so repeated runs without a fixed seed may differ. Nearest
    centroid ties go to the lowest centroid index. Empty clusters are reseeded
    from a random order. The result always has exactly one entry per centroid,
    some of which may be empty, and every order appears exactly once.
    """

    if k < 0:
        raise ValueError("k must be >= 0")
    if not orders or k == 0:
        return []
    if k >= len(orders):
        return [[order] for order in orders]
    if k == 1:
        return [list(orders)]

    max_iterations = max_iterations if max_iterations is not None else settings.kmeans_max_iterations
    generator = np.random.default_rng(rng)

    count = len(orders)
    lats = np.array([order.location.latitude for order in orders], dtype=float)
    lons = np.array([order.location.longitude for order in orders], dtype=float)

    seeds = generator.choice(count, size=k, replace=False)
    centre_lats = lats[seeds].copy()
    centre_lons = lons[seeds].copy()

    labels = np.full(count, -1, dtype=int)
    iterations = 0
    changed = True

    while changed and iterations < max_iterations:
        distances = haversine_matrix_km(lats, lons, centre_lats, centre_lons)
        # argmin returns the first minimum, i.e. the lowest centroid index on ties.
        new_labels = np.argmin(distances, axis=1)
        changed = not np.array_equal(new_labels, labels)
        labels = new_labels

        for cluster_index in range(k):
            members = labels == cluster_index
            if members.any():
                centre_lats[cluster_index] = lats[members].mean()
                centre_lons[cluster_index] = lons[members].mean()
            else:
                reseed = int(generator.integers(count))
                centre_lats[cluster_index] = lats[reseed]
                centre_lons[cluster_index] = lons[reseed]

        iterations += 1

    logger.info(f"K-Means finished after {iterations} iterations for {count} orders and k={k}")

    return [[orders[int(index)] for index in np.flatnonzero(labels == cluster_index)] for cluster_index in range(k)]

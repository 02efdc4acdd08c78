import numpy as np
import pytest

from fieldroute.models.domain import GeoPoint, Order
from fieldroute.services.routing.tour import calculate_route_distance, nearest_neighbor_sort, two_opt_optimize


def _order(oid: str, lat: float, lon: float) -> Order:
    return Order(id=oid, location=GeoPoint(lat, lon))


def _random_orders(count: int, seed: int) -> list[Order]:
    generator = np.random.default_rng(seed)
    return [
        _order(f"O{i}", float(generator.uniform(-27.2, -26.8)), float(generator.uniform(-48.8, -48.5)))
        for i in range(count)
    ]


def _ids(orders):
    return [order.id for order in orders]


def test_route_distance_of_short_routes_is_zero():
    assert calculate_route_distance([]) == 0.0
    assert calculate_route_distance([_order("A", -26.9, -48.6)]) == 0.0


def test_route_distance_sums_consecutive_legs():
    route = [_order("A", 0.0, 10.0), _order("B", 1.0, 10.0), _order("C", 2.0, 10.0)]
    assert calculate_route_distance(route) == pytest.approx(2 * 111.195, rel=0.01)


@pytest.mark.parametrize("size", [0, 1, 2, 5, 12])
def test_nearest_neighbor_is_a_permutation(size):
    orders = _random_orders(size, seed=size)
    result = nearest_neighbor_sort(orders)
    assert sorted(_ids(result)) == sorted(_ids(orders))


def test_nearest_neighbor_starts_at_northernmost_order():
    orders = [_order("south", -27.5, -48.6), _order("north", -26.5, -48.6), _order("middle", -27.0, -48.6)]

    result = nearest_neighbor_sort(orders)

    assert _ids(result) == ["north", "middle", "south"]


def test_nearest_neighbor_follows_closest_stop():
    orders = [
        _order("A", -26.90, -48.60),
        _order("far", -26.95, -48.90),
        _order("B", -26.91, -48.61),
        _order("C", -26.92, -48.63),
    ]

    assert _ids(nearest_neighbor_sort(orders)) == ["A", "B", "C", "far"]


def test_nearest_neighbor_does_not_mutate_input():
    orders = _random_orders(6, seed=1)
    snapshot = list(orders)
    nearest_neighbor_sort(orders)
    assert orders == snapshot


def test_two_opt_leaves_short_routes_unchanged():
    for size in range(4):
        route = _random_orders(size, seed=size)
        assert two_opt_optimize(route) == route


def test_two_opt_uncrosses_a_path():
    route = [_order("0", 0.0, 0.0), _order("2", 0.0, 0.02), _order("1", 0.0, 0.01), _order("3", 0.0, 0.03)]

    improved = two_opt_optimize(route)

    assert _ids(improved) == ["0", "1", "2", "3"]
    assert calculate_route_distance(improved) < calculate_route_distance(route)


def test_two_opt_keeps_endpoints_of_an_optimal_path():
    route = [_order(str(i), 0.0, i * 0.01) for i in range(6)]
    assert _ids(two_opt_optimize(route)) == _ids(route)


@pytest.mark.parametrize("seed", range(8))
def test_two_opt_never_lengthens_and_is_a_permutation(seed):
    route = _random_orders(15, seed=seed)

    improved = two_opt_optimize(route)

    assert sorted(_ids(improved)) == sorted(_ids(route))
    assert calculate_route_distance(improved) <= calculate_route_distance(route) + 1e-9


def test_two_opt_after_nearest_neighbor_never_lengthens():
    route = nearest_neighbor_sort(_random_orders(20, seed=42))
    assert calculate_route_distance(two_opt_optimize(route)) <= calculate_route_distance(route) + 1e-9


def test_two_opt_respects_pass_cap():
    route = _random_orders(12, seed=3)
    improved = two_opt_optimize(route, max_passes=1)
    assert sorted(_ids(improved)) == sorted(_ids(route))
    assert calculate_route_distance(improved) <= calculate_route_distance(route) + 1e-9

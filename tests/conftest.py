from __future__ import annotations

from typing import Callable

import httpx
import pytest

from fieldroute.config import settings
from fieldroute.services.geocoding.nominatim_client import NominatimClient, RateLimiter


class FakeClock:
    """Deterministic stand-in for time.monotonic/time.sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []
        self.on_sleep: Callable[[], None] | None = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep()


class StubGeocoder:
    """Records every query and answers from a ``query -> (lat, lon)`` table."""

    def __init__(self, answers: dict[str, tuple[float, float]] | None = None) -> None:
        self.answers = answers or {}
        self.queries: list[str] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        self.queries.append(query)
        self.requests.append(request)
        if query in self.answers:
            lat, lon = self.answers[query]
            return httpx.Response(200, json=[{"lat": str(lat), "lon": str(lon), "display_name": query}])
        return httpx.Response(200, json=[])


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(fake_clock: FakeClock) -> Callable[..., NominatimClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> NominatimClient:
        limiter = RateLimiter(1.5, clock=fake_clock.monotonic, sleep=fake_clock.sleep)
        return NominatimClient(
            base_url="https://geocoder.test",
            user_agent="FieldRouteTests/1.0",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            rate_limiter=limiter,
        )

    return factory


@pytest.fixture
def stub_geocoder() -> type[StubGeocoder]:
    return StubGeocoder


@pytest.fixture(autouse=True)
def default_locality(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "geocoder_country", "Brasil")
    monkeypatch.setattr(settings, "geocoder_region", "Santa Catarina")

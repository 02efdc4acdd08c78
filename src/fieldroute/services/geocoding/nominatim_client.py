"""HTTP client for the Nominatim geocoding service."""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from typing import Any, Callable

import httpx

from ...config import MIN_GEOCODER_DELAY_SECONDS, settings
from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)

CANCEL_POLL_SECONDS = 0.1


class RateLimiter:
    """Keeps a minimum gap between the end of one request and the start of the next."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < MIN_GEOCODER_DELAY_SECONDS:
            raise ValueError(
                f"Geocoder delay must be at least {MIN_GEOCODER_DELAY_SECONDS}s (got {min_interval}s)."
            )
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None

    def wait(self, cancel_event: threading.Event | None = None) -> bool:
        """Block until the next request may start. Returns False if cancelled while waiting.

        With a ``cancel_event`` the wait is split into slices of at most
        ``CANCEL_POLL_SECONDS`` so a cancellation is noticed mid-gap.
        """
        if cancel_event is not None and cancel_event.is_set():
            return False
        if self._last_request is None:
            return True
        deadline = self._last_request + self.min_interval
        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return True
            if cancel_event is None:
                self._sleep(remaining)
                continue
            self._sleep(min(remaining, CANCEL_POLL_SECONDS))
            if cancel_event.is_set():
                return False

    def mark(self) -> None:
        self._last_request = self._clock()


class NominatimClient:
    """Resolve free-text addresses with one request at a time, honouring the usage policy.

    Every failure mode (transport error, non-2xx status, malformed body, empty
    result set) is logged and reported as ``None``; nothing but a blank query
    raises.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        delay_seconds: float | None = None,
        http_client: httpx.Client | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        delay = delay_seconds if delay_seconds is not None else settings.geocoder_delay_seconds
        self.rate_limiter = rate_limiter or RateLimiter(delay)
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "NominatimClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def geocode_address(self, query: str, *, cancel_event: threading.Event | None = None) -> GeoPoint | None:
        """Look up ``query`` and return the first match, if any."""
        if not query or not query.strip():
            raise ValueError("Geocoding query must not be empty.")

        if not self.rate_limiter.wait(cancel_event):
            logger.info(f"Geocoding cancelled before querying '{query}'")
            return None

        params = {"q": query, "format": "json", "limit": 1}
        try:
            response = self._client.get(f"{self.base_url}/search", params=params, headers=self.headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Geocoding service returned {e.response.status_code} for '{query}'")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding request failed for '{query}': {e}")
            return None
        except ValueError as e:
            logger.warning(f"Geocoding response for '{query}' is not valid JSON: {e}")
            return None
        finally:
            self.rate_limiter.mark()

        return _parse_first_result(query, data)


@lru_cache()
def get_geocoder() -> NominatimClient:
    """Process-wide client so every API request shares one rate limiter.

    Callers must hold ``geocoder_lock`` while using it; requests are never issued concurrently.
    """
    return NominatimClient()


geocoder_lock = threading.Lock()


def _parse_first_result(query: str, data: Any) -> GeoPoint | None:
    if not isinstance(data, list) or not data:
        logger.debug(f"No geocoding match for '{query}'")
        return None
    first = data[0]
    try:
        return GeoPoint(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Malformed geocoding result for '{query}': {e}")
        return None

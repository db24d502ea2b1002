from __future__ import annotations

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from .classifier import classify
from .models import Outcome, RouteQuery, TransportError
from .search_params import HeaderConfig, QueryConfig, build_headers, build_params

SEARCH_URL = "https://azal.az/book/api/flights/search/by-deeplink"

logger = logging.getLogger(__name__)


class AzalFetcherError(RuntimeError):
    """Transport-level failure talking to the search endpoint."""


class AzalFetcher:
    """
    Client for the AZAL deeplink search endpoint.

    One instance is bound to a single origin/destination pair; only the
    departure day changes between calls.
    """

    def __init__(
        self,
        origin: str,
        destination: str,
        *,
        url: str = SEARCH_URL,
        headers: HeaderConfig | None = None,
        query: QueryConfig | None = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.route = RouteQuery(origin=origin, destination=destination)
        self.url = url
        self.headers = headers or HeaderConfig()
        self.query_conf = query or QueryConfig()
        self.timeout = timeout

    # ──────────────────────────────────────────────────────────

    def query(self, day: str) -> Outcome:
        """Search flights departing on *day* (``YYYY-MM-DD``).

        Never raises for network or payload problems; those come back as
        ``TransportError`` so the caller can move on to the next day.
        """
        try:
            payload = self._get(day)
        except (requests.RequestException, AzalFetcherError) as exc:
            return TransportError(cause=str(exc))

        try:
            return classify(payload)
        except ValidationError as exc:
            return TransportError(
                cause=f"unexpected response shape: {exc.error_count()} error(s)"
            )

    def _get(self, day: str) -> dict:
        route = self.route.with_day(day)
        resp = requests.get(
            self.url,
            params=build_params(self.query_conf, route),
            headers=build_headers(self.headers),
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise AzalFetcherError(f"status code: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise AzalFetcherError(f"malformed JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise AzalFetcherError(
                f"expected a JSON object, got {type(data).__name__}"
            )
        logger.debug("Search %s->%s %s: %d top-level keys",
                     route.origin, route.destination, day, len(data))
        return data


__all__ = ["AzalFetcher", "AzalFetcherError", "SEARCH_URL"]

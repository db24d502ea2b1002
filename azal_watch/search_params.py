"""Static headers and query parameters sent with every search request.

Each config model is paired with an ordered table of ``(wire key, accessor)``
tuples, so the mapping from fields to HTTP names is spelled out once and
never discovered at runtime.
"""

from __future__ import annotations

import time
from operator import attrgetter
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from .models import RouteQuery


class HeaderConfig(BaseModel):
    """Browser-like headers the booking site expects."""

    host: str = "book.azal.az"
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/115.0"
    )
    accept: str = "application/json, text/plain, */*"
    accept_language: str = "en-US,en;q=0.5"
    accept_encoding: str = "gzip, deflate, br"
    x_application: str = "ibe"
    x_locale: str = "az"
    connection: str = "keep-alive"
    referer: str = ""
    sec_fetch_dest: str = "empty"
    sec_fetch_mode: str = "cors"
    sec_fetch_site: str = "same-origin"
    te: str = "trailers"


class QueryConfig(BaseModel):
    lang: str = "az"
    trip_type: str = "OW"
    adult_count: str = "1"
    child_count: str = "0"
    infant_count: str = "0"
    is_student: str = "0"
    is_citizen: str = "1"
    currency: str = "AZN"
    theme: str = "dark"
    # pinned only in tests; normally recomputed per request
    timestamp: Optional[str] = None


HEADER_FIELDS: Tuple[Tuple[str, Callable[[HeaderConfig], str]], ...] = (
    ("Host", attrgetter("host")),
    ("User-Agent", attrgetter("user_agent")),
    ("Accept", attrgetter("accept")),
    ("Accept-Language", attrgetter("accept_language")),
    ("Accept-Encoding", attrgetter("accept_encoding")),
    ("x-application", attrgetter("x_application")),
    ("x-locale", attrgetter("x_locale")),
    ("Connection", attrgetter("connection")),
    ("Referer", attrgetter("referer")),
    ("Sec-Fetch-Dest", attrgetter("sec_fetch_dest")),
    ("Sec-Fetch-Mode", attrgetter("sec_fetch_mode")),
    ("Sec-Fetch-Site", attrgetter("sec_fetch_site")),
    ("TE", attrgetter("te")),
)

QUERY_FIELDS: Tuple[Tuple[str, Callable[[QueryConfig, RouteQuery], str]], ...] = (
    ("lang", lambda q, r: q.lang),
    ("from", lambda q, r: r.origin),
    ("to", lambda q, r: r.destination),
    ("departure_date", lambda q, r: r.day),
    ("tripType", lambda q, r: q.trip_type),
    ("adult_count", lambda q, r: q.adult_count),
    ("child_count", lambda q, r: q.child_count),
    ("infant_count", lambda q, r: q.infant_count),
    ("is_student", lambda q, r: q.is_student),
    ("timestamp", lambda q, r: q.timestamp or epoch_millis()),
    ("is_citizen", lambda q, r: q.is_citizen),
    ("currency", lambda q, r: q.currency),
    ("theme", lambda q, r: q.theme),
)


def epoch_millis() -> str:
    return str(time.time_ns() // 1_000_000)


def build_headers(conf: HeaderConfig) -> Dict[str, str]:
    """Return request headers; empty values are left out."""
    headers: Dict[str, str] = {}
    for key, accessor in HEADER_FIELDS:
        value = accessor(conf)
        if value:
            headers[key] = value
    return headers


def build_params(conf: QueryConfig, route: RouteQuery) -> Dict[str, str]:
    """Return query parameters for one search, in wire order."""
    return {key: accessor(conf, route) for key, accessor in QUERY_FIELDS}


__all__ = [
    "HEADER_FIELDS",
    "HeaderConfig",
    "QUERY_FIELDS",
    "QueryConfig",
    "build_headers",
    "build_params",
    "epoch_millis",
]

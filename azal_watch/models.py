"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, List, Tuple, Union

DAY_FORMAT = "%Y-%m-%d"
INSTANT_FORMAT = "%Y-%m-%dT%H:%M:%S"

# day (YYYY-MM-DD) -> departure times, in response order
AvailabilityReport = Dict[str, List[datetime]]


@dataclass(frozen=True, slots=True)
class AcceptanceWindow:
    first_instant: datetime
    last_instant: datetime

    def contains(self, moment: datetime) -> bool:
        """Inclusive on both ends."""
        return self.first_instant <= moment <= self.last_instant


@dataclass(frozen=True, slots=True)
class RouteQuery:
    origin: str
    destination: str
    day: str = ""

    def with_day(self, day: str) -> "RouteQuery":
        return replace(self, day=day)


@dataclass(slots=True)
class FlightOption:
    option_id: str
    available: bool
    route_id: str
    departure: datetime


# ── Outcome of a single search request ───────────────────────────


@dataclass(slots=True)
class Success:
    options: List[FlightOption] = field(default_factory=list)


@dataclass(slots=True)
class NoFlightsAvailable:
    # "error" when signalled by the error code, "warnings" otherwise
    reason: str = "error"


@dataclass(slots=True)
class UnknownDomainError:
    code: str
    text: str = ""


@dataclass(slots=True)
class TransportError:
    cause: str


Outcome = Union[Success, NoFlightsAvailable, UnknownDomainError, TransportError]


def candidate_days(window: AcceptanceWindow) -> Tuple[str, ...]:
    """Return every calendar day touched by *window*, oldest first."""
    first = window.first_instant.date()
    last = window.last_instant.date()
    return tuple(
        date.fromordinal(ordinal).isoformat()
        for ordinal in range(first.toordinal(), last.toordinal() + 1)
    )


__all__ = [
    "AcceptanceWindow",
    "AvailabilityReport",
    "DAY_FORMAT",
    "FlightOption",
    "INSTANT_FORMAT",
    "NoFlightsAvailable",
    "Outcome",
    "RouteQuery",
    "Success",
    "TransportError",
    "UnknownDomainError",
    "candidate_days",
]

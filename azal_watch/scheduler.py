from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol, Sequence

import requests

from .availability_filter import filter_departures
from .colors import Severity
from .models import (
    AcceptanceWindow,
    AvailabilityReport,
    NoFlightsAvailable,
    Outcome,
    Success,
    TransportError,
    UnknownDomainError,
)
from .notifier import NotificationDeliveryError, Notifier

logger = logging.getLogger(__name__)


class FlightQuery(Protocol):
    def query(self, day: str) -> Outcome: ...


# ────────────────────────────────────────────────────────────────
# One cycle
# ────────────────────────────────────────────────────────────────


def run_cycle(
    fetcher: FlightQuery,
    days: Sequence[str],
    window: AcceptanceWindow,
    *,
    require_available: bool = False,
    stop: Optional[threading.Event] = None,
) -> AvailabilityReport:
    """Query every day once, in order, and collect matching departures.

    A failed or empty day never stops the cycle; a set *stop* event does,
    leaving the remaining days unqueried.
    """
    report: AvailabilityReport = {}

    for day in days:
        if stop is not None and stop.is_set():
            logger.info("Stop requested, skipping remaining days")
            break
        outcome = fetcher.query(day)

        if isinstance(outcome, NoFlightsAvailable):
            logger.info(
                "No flights available for %s",
                day,
                extra={"severity": Severity.WARNING},
            )
            continue
        if isinstance(outcome, UnknownDomainError):
            logger.error("unknown error: %s (%s)", outcome.code, day)
            continue
        if isinstance(outcome, TransportError):
            logger.error("Request for %s failed: %s", day, outcome.cause)
            continue

        if isinstance(outcome, Success):
            accepted = filter_departures(
                outcome.options, window, require_available=require_available
            )
            if accepted:
                report[day] = accepted

    return report


# ────────────────────────────────────────────────────────────────
# Main loop
# ────────────────────────────────────────────────────────────────


def run_forever(
    fetcher: FlightQuery,
    days: Sequence[str],
    window: AcceptanceWindow,
    notifier: Notifier,
    interval_s: float,
    *,
    stop: Optional[threading.Event] = None,
    once: bool = False,
    require_available: bool = False,
) -> int:
    """Poll until *stop* is set (or after one cycle with *once*).

    A cycle cut short by *stop* is dropped without notifying.

    Returns the number of completed cycles.
    """
    stop = stop or threading.Event()
    cycles = 0

    while not stop.is_set():
        report = run_cycle(
            fetcher, days, window, require_available=require_available, stop=stop
        )
        if stop.is_set():
            break
        cycles += 1
        logger.info(
            "Cycle %d finished: %d day(s) with flights",
            cycles,
            len(report),
        )
        try:
            notifier.notify(report)
        except (requests.RequestException, NotificationDeliveryError) as exc:
            logger.error("Error: %s", exc)

        if once:
            break
        # returns early when stop is set
        stop.wait(interval_s)

    return cycles


__all__ = ["FlightQuery", "run_cycle", "run_forever"]

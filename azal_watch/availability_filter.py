from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List

from .colors import Severity
from .models import AcceptanceWindow, FlightOption

logger = logging.getLogger(__name__)


def filter_departures(
    options: Iterable[FlightOption],
    window: AcceptanceWindow,
    *,
    require_available: bool = False,
) -> List[datetime]:
    """Return departure times of *options* that fall inside *window*.

    Both window bounds are inclusive and the input order is kept. The
    ``available`` flag of an option is ignored unless *require_available*
    is set.
    """
    accepted: List[datetime] = []
    for opt in options:
        departure = opt.departure
        if require_available and not opt.available:
            logger.info(
                "Flight %s not bookable, skipping",
                departure,
                extra={"severity": Severity.WARNING},
            )
            continue
        if window.contains(departure):
            accepted.append(departure)
            logger.info(
                "Flight available for %s",
                departure,
                extra={"severity": Severity.SUCCESS},
            )
        else:
            logger.info(
                "No flights available for %s",
                departure,
                extra={"severity": Severity.WARNING},
            )
    return accepted


__all__ = ["filter_departures"]

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .models import (
    INSTANT_FORMAT,
    FlightOption,
    NoFlightsAvailable,
    Outcome,
    Success,
    UnknownDomainError,
)

NO_FLIGHTS_CODE = "no.flights.available"


# ────────────────────────────────────────────────────────────────
# Response shapes
# ────────────────────────────────────────────────────────────────


class ErrorBody(BaseModel):
    code: str = ""
    text: str = ""

    @field_validator("code", "text", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ErrorResponse(BaseModel):
    error: Optional[ErrorBody] = None


class RouteBody(BaseModel):
    id: str = ""
    departure_date: datetime = Field(alias="departureDate")

    @field_validator("id", mode="before")
    @classmethod
    def _null_id(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("departure_date", mode="before")
    @classmethod
    def _parse_local_timestamp(cls, v: Any) -> datetime:
        # fixed format, no timezone; isoformat parsing would be too lenient
        if isinstance(v, str):
            return datetime.strptime(v, INSTANT_FORMAT)
        raise ValueError("departureDate must be a string")


class OptionBody(BaseModel):
    id: str = ""
    available: bool = False
    route: RouteBody

    @field_validator("id", mode="before")
    @classmethod
    def _null_id(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("available", mode="before")
    @classmethod
    def _null_unavailable(cls, v: Any) -> Any:
        return False if v is None else v


class OptionSet(BaseModel):
    options: List[OptionBody] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v


class SearchBody(BaseModel):
    option_sets: List[OptionSet] = Field(default_factory=list, alias="optionSets")

    @field_validator("option_sets", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v


class SuccessResponse(BaseModel):
    warnings: Optional[List[Any]] = None
    search: Optional[SearchBody] = None

    def first_options(self) -> List[FlightOption]:
        if self.search is None or not self.search.option_sets:
            return []
        return [
            FlightOption(
                option_id=opt.id,
                available=opt.available,
                route_id=opt.route.id,
                departure=opt.route.departure_date,
            )
            for opt in self.search.option_sets[0].options
        ]


# ────────────────────────────────────────────────────────────────
# Classification
# ────────────────────────────────────────────────────────────────


def domain_error(code: str, text: str = "") -> Outcome:
    """Map a non-empty error code onto its outcome."""
    if code == NO_FLIGHTS_CODE:
        return NoFlightsAvailable(reason="error")
    return UnknownDomainError(code=code, text=text)


def classify(payload: Mapping[str, Any]) -> Outcome:
    """Decide what a decoded search response means.

    An error code wins over anything else in the payload. Without one, a
    non-empty ``warnings`` list means there is nothing to book that day,
    even when an (empty) option set is present. Only then are the options
    of the first option set taken as the result.

    Raises ``pydantic.ValidationError`` when the payload does not match
    either documented shape.
    """
    err = ErrorResponse.model_validate(payload)
    if err.error is not None and err.error.code:
        return domain_error(err.error.code, err.error.text)

    data = SuccessResponse.model_validate(payload)
    if data.warnings:
        return NoFlightsAvailable(reason="warnings")
    return Success(options=data.first_options())


__all__ = [
    "ErrorResponse",
    "NO_FLIGHTS_CODE",
    "SuccessResponse",
    "classify",
    "domain_error",
]

from __future__ import annotations

from datetime import datetime, timedelta
from functools import cached_property, lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from .azal_fetcher import SEARCH_URL
from .models import DAY_FORMAT, INSTANT_FORMAT, AcceptanceWindow, candidate_days

load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_key: str = Field("", alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str = Field("", alias="TELEGRAM_CHAT_ID")
    search_url: str = Field(SEARCH_URL, alias="AZAL_SEARCH_URL")
    request_timeout: Optional[float] = Field(None, alias="AZAL_REQUEST_TIMEOUT")
    require_available: bool = Field(False, alias="AZAL_REQUIRE_AVAILABLE")
    log_file: str = Field("", alias="AZAL_LOG_FILE")
    log_level: str = Field("INFO", alias="AZAL_LOG_LEVEL")

    @field_validator("request_timeout")
    @classmethod
    def _timeout_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("AZAL_REQUEST_TIMEOUT must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"AZAL_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}"
            )
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


# ────────────────────────────────────────────────────────────────
# Search parameters given on the command line
# ────────────────────────────────────────────────────────────────


def parse_instant(text: str, *, end_of_day: bool = False) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM:SS`` or a bare ``YYYY-MM-DD``.

    A bare date means midnight, or the last second of that day when
    *end_of_day* is set.
    """
    try:
        return datetime.strptime(text, INSTANT_FORMAT)
    except ValueError:
        pass
    try:
        day = datetime.strptime(text, DAY_FORMAT)
    except ValueError:
        raise ValueError(
            f"{text!r} is not in format YYYY-MM-DDTHH:MM:SS or YYYY-MM-DD"
        ) from None
    if end_of_day:
        return day + timedelta(days=1) - timedelta(seconds=1)
    return day


class BotConfig(BaseModel):
    """Validated, immutable search parameters for one process."""

    model_config = ConfigDict(frozen=True)

    first_instant: datetime
    last_instant: datetime
    origin: str
    destination: str
    repet_interval: int = 60
    telegram_bot_key: str = ""
    telegram_chat_id: str = ""

    @field_validator("origin", "destination")
    @classmethod
    def _airport_code(cls, v: str) -> str:
        if len(v) < 2 or len(v) > 5:
            raise ValueError("should be between 2 and 5 characters")
        return v

    @field_validator("repet_interval")
    @classmethod
    def _interval_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("repetition interval should be greater than 0")
        return v

    @model_validator(mode="after")
    def _check_consistency(self) -> "BotConfig":
        if self.first_instant >= self.last_instant:
            raise ValueError(
                "first date should be before last date and they should not be equal"
            )
        if self.telegram_bot_key and not self.telegram_chat_id:
            raise ValueError("telegram chat id is required if telegram bot key is provided")
        if self.telegram_chat_id and not self.telegram_bot_key:
            raise ValueError("telegram bot key is required if telegram chat id is provided")
        return self

    @classmethod
    def from_input(
        cls,
        first_date: str,
        last_date: str,
        origin: str,
        destination: str,
        repet_interval: int = 60,
        telegram_bot_key: str = "",
        telegram_chat_id: str = "",
    ) -> "BotConfig":
        return cls(
            first_instant=parse_instant(first_date),
            last_instant=parse_instant(last_date, end_of_day=True),
            origin=origin,
            destination=destination,
            repet_interval=repet_interval,
            telegram_bot_key=telegram_bot_key,
            telegram_chat_id=telegram_chat_id,
        )

    @property
    def window(self) -> AcceptanceWindow:
        return AcceptanceWindow(self.first_instant, self.last_instant)

    @cached_property
    def days(self) -> Tuple[str, ...]:
        return candidate_days(self.window)

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_key)


__all__ = ["BotConfig", "Settings", "get_settings", "parse_instant"]

from __future__ import annotations

import logging
from typing import List, Protocol

import requests

from .config import BotConfig
from .models import INSTANT_FORMAT, AvailabilityReport

TELEGRAM_API_URL = "https://api.telegram.org/bot{key}/sendMessage"
TITLE = "Azal Bot"
DAY_SEPARATOR = "-----------"
TIME_FORMAT = "%H:%M:%S"

logger = logging.getLogger(__name__)


class NotificationDeliveryError(RuntimeError):
    """The messaging endpoint did not accept the message."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"telegram send message status code: {status_code}")
        self.status_code = status_code


class Notifier(Protocol):
    def notify(self, report: AvailabilityReport) -> None: ...


class NullNotifier:
    """Used when no messaging channel is configured."""

    def notify(self, report: AvailabilityReport) -> None:
        return None


def render_report(report: AvailabilityReport) -> str:
    """Format *report* as one message, days in chronological order."""
    blocks: List[str] = []
    for day in sorted(report):
        lines = [day, DAY_SEPARATOR]
        lines.extend(t.strftime(TIME_FORMAT) for t in report[day])
        blocks.append("\n".join(lines))
    return f"{TITLE}\n\n" + "\n\n".join(blocks)


def format_interval(seconds: int) -> str:
    """Render like a Go duration: ``45s``, ``2m0s``, ``1h0m30s``."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def render_start(cfg: BotConfig) -> str:
    return (
        f"{TITLE} started\n\n"
        f"From: {cfg.origin}\n"
        f"To: {cfg.destination}\n"
        f"First Date: {cfg.first_instant.strftime(INSTANT_FORMAT)}\n"
        f"Last Date: {cfg.last_instant.strftime(INSTANT_FORMAT)}\n"
        f"Repetition Interval: {format_interval(cfg.repet_interval)}"
    )


class TelegramNotifier:
    def __init__(self, bot_key: str, chat_id: str, *, timeout: float | None = None) -> None:
        self.bot_key = bot_key
        self.chat_id = chat_id
        self.timeout = timeout

    def send_message(self, text: str) -> None:
        """POST *text* to the chat; raise on anything but HTTP 200."""
        resp = requests.post(
            TELEGRAM_API_URL.format(key=self.bot_key),
            params={
                "chat_id": self.chat_id,
                "text": text,
                "parse_mode": "HTML",
            },
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            raise NotificationDeliveryError(resp.status_code)

    def notify(self, report: AvailabilityReport) -> None:
        if not report:
            return
        self.send_message(render_report(report))

    def send_start(self, cfg: BotConfig) -> None:
        """One-time startup summary; failures are logged only."""
        try:
            self.send_message(render_start(cfg))
        except (requests.RequestException, NotificationDeliveryError) as exc:
            logger.error("Start notification failed: %s", exc)


__all__ = [
    "NotificationDeliveryError",
    "Notifier",
    "NullNotifier",
    "TelegramNotifier",
    "format_interval",
    "render_report",
    "render_start",
]

from __future__ import annotations

import logging
import signal
import threading
from typing import Optional

import click
from pydantic import ValidationError

from .azal_fetcher import AzalFetcher
from .colors import ColorFormatter
from .config import BotConfig, Settings, get_settings
from .models import NoFlightsAvailable, Success, TransportError, UnknownDomainError
from .notifier import Notifier, NullNotifier, TelegramNotifier
from .scheduler import run_forever

VERSION = "0.1.0"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Colour on the console, plain text in the optional log file."""
    stream = logging.StreamHandler()
    stream.setFormatter(ColorFormatter(LOG_FORMAT))
    handlers: list[logging.Handler] = [stream]
    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)
    logging.basicConfig(level=settings.log_level, handlers=handlers, force=True)


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
        for err in exc.errors()
    )


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise click.UsageError(
            f"invalid environment settings: {_validation_message(exc)}"
        ) from exc


def _install_stop_handlers(stop: threading.Event) -> None:
    """First SIGINT/SIGTERM asks the loop to stop; a second one is fatal."""

    def _handler(signum, frame) -> None:
        logger.info("Received signal %s, stopping after current request", signum)
        stop.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


@click.group()
@click.version_option(VERSION, prog_name="Azal Bot")
def cli() -> None:
    """A CLI tool to find the flights."""


@cli.command()
@click.option("-i", "--first-date", required=True,
              help="First date in format '2006-01-02T15:04:05' or '2006-01-02'")
@click.option("-l", "--last-date", required=True,
              help="Last date in format '2006-01-02T15:04:05' or '2006-01-02'")
@click.option("-f", "--from", "origin", required=True,
              help="From where you want to fly (e.g. NAJ)")
@click.option("-t", "--to", "destination", required=True,
              help="To where you want to fly (e.g. BAK)")
@click.option("-r", "--repet-interval", type=int, default=60, show_default=True,
              help="Repetition interval in seconds")
@click.option("--telegram-bot-key", default=None, help="Telegram bot key")
@click.option("--telegram-chat-id", default=None, help="Telegram chat id")
@click.option("--once", is_flag=True, help="Run a single cycle and exit")
def run(
    first_date: str,
    last_date: str,
    origin: str,
    destination: str,
    repet_interval: int,
    telegram_bot_key: Optional[str],
    telegram_chat_id: Optional[str],
    once: bool,
) -> None:
    """Poll the search endpoint and report newly available flights."""
    settings = _load_settings()
    try:
        bot_cfg = BotConfig.from_input(
            first_date,
            last_date,
            origin,
            destination,
            repet_interval=repet_interval,
            telegram_bot_key=telegram_bot_key or settings.telegram_bot_key,
            telegram_chat_id=telegram_chat_id or settings.telegram_chat_id,
        )
    except ValidationError as exc:
        raise click.UsageError(_validation_message(exc)) from exc
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    configure_logging(settings)

    fetcher = AzalFetcher(
        bot_cfg.origin,
        bot_cfg.destination,
        url=settings.search_url,
        timeout=settings.request_timeout,
    )
    notifier: Notifier = NullNotifier()
    if bot_cfg.telegram_enabled:
        telegram = TelegramNotifier(
            bot_cfg.telegram_bot_key,
            bot_cfg.telegram_chat_id,
            timeout=settings.request_timeout,
        )
        telegram.send_start(bot_cfg)
        notifier = telegram

    logger.info(
        "Watching %s -> %s on %d day(s), every %ds",
        bot_cfg.origin,
        bot_cfg.destination,
        len(bot_cfg.days),
        bot_cfg.repet_interval,
    )

    stop = threading.Event()
    if not once:
        _install_stop_handlers(stop)
    run_forever(
        fetcher,
        bot_cfg.days,
        bot_cfg.window,
        notifier,
        bot_cfg.repet_interval,
        stop=stop,
        once=once,
        require_available=settings.require_available,
    )


@cli.command()
@click.option("-f", "--from", "origin", required=True, help="Origin airport code")
@click.option("-t", "--to", "destination", required=True, help="Destination airport code")
@click.argument("day")
def query(origin: str, destination: str, day: str) -> None:
    """Run a single search for DAY (YYYY-MM-DD) and print the result."""
    settings = _load_settings()
    fetcher = AzalFetcher(
        origin, destination, url=settings.search_url, timeout=settings.request_timeout
    )
    outcome = fetcher.query(day)

    if isinstance(outcome, Success):
        if not outcome.options:
            click.echo("No offers found")
        for opt in outcome.options:
            flag = "available" if opt.available else "unavailable"
            click.echo(f"{opt.departure.isoformat()}  {opt.route_id}  {flag}")
    elif isinstance(outcome, NoFlightsAvailable):
        click.echo(f"No flights available for {day}")
    elif isinstance(outcome, UnknownDomainError):
        raise click.ClickException(f"unknown error: {outcome.code}")
    elif isinstance(outcome, TransportError):
        raise click.ClickException(outcome.cause)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

import logging
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import requests

from azal_watch.config import BotConfig
from azal_watch.notifier import (
    NotificationDeliveryError,
    NullNotifier,
    TelegramNotifier,
    format_interval,
    render_report,
    render_start,
)


def make_report():
    return {
        "2024-09-25": [datetime(2024, 9, 25, 7, 0, 0)],
        "2024-09-24": [datetime(2024, 9, 24, 15, 4, 5), datetime(2024, 9, 24, 18, 30, 0)],
    }


def test_render_single_day():
    text = render_report(
        {"2024-09-24": [datetime(2024, 9, 24, 15, 4, 5), datetime(2024, 9, 24, 18, 30, 0)]}
    )
    assert text == "Azal Bot\n\n2024-09-24\n-----------\n15:04:05\n18:30:00"
    assert not text.endswith("\n")


def test_render_sorts_days_and_separates_blocks():
    text = render_report(make_report())
    assert text == (
        "Azal Bot\n\n"
        "2024-09-24\n-----------\n15:04:05\n18:30:00\n\n"
        "2024-09-25\n-----------\n07:00:00"
    )


@patch("requests.post")
def test_empty_report_sends_nothing(mock_post):
    TelegramNotifier("key", "42").notify({})
    mock_post.assert_not_called()


@patch("requests.post")
def test_notify_posts_message(mock_post):
    mock_post.return_value = Mock(status_code=200)

    TelegramNotifier("key", "42").notify(make_report())

    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args == ("https://api.telegram.org/botkey/sendMessage",)
    assert kwargs["params"]["chat_id"] == "42"
    assert kwargs["params"]["parse_mode"] == "HTML"
    assert kwargs["params"]["text"] == render_report(make_report())


@patch("requests.post")
def test_non_200_raises_without_retry(mock_post):
    mock_post.return_value = Mock(status_code=403)
    with pytest.raises(NotificationDeliveryError) as excinfo:
        TelegramNotifier("key", "42").notify(make_report())
    assert excinfo.value.status_code == 403
    assert mock_post.call_count == 1


def test_null_notifier_is_silent():
    assert NullNotifier().notify(make_report()) is None


def make_bot_config():
    return BotConfig.from_input("2024-09-24", "2024-09-27", "NAJ", "GYD", repet_interval=90)


def test_render_start():
    assert render_start(make_bot_config()) == (
        "Azal Bot started\n\n"
        "From: NAJ\n"
        "To: GYD\n"
        "First Date: 2024-09-24T00:00:00\n"
        "Last Date: 2024-09-27T23:59:59\n"
        "Repetition Interval: 1m30s"
    )


@patch("requests.post")
def test_start_failure_is_only_logged(mock_post, caplog):
    mock_post.side_effect = requests.ConnectionError("offline")
    caplog.set_level(logging.ERROR)

    TelegramNotifier("key", "42").send_start(make_bot_config())

    assert any("offline" in r.getMessage() for r in caplog.records)


@patch("requests.post")
def test_start_non_200_is_only_logged(mock_post, caplog):
    mock_post.return_value = Mock(status_code=400)
    caplog.set_level(logging.ERROR)

    TelegramNotifier("key", "42").send_start(make_bot_config())

    assert any("400" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "seconds, text",
    [(1, "1s"), (45, "45s"), (60, "1m0s"), (120, "2m0s"), (3600, "1h0m0s"), (3690, "1h1m30s")],
)
def test_format_interval_like_go_duration(seconds, text):
    assert format_interval(seconds) == text

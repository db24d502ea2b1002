import re
from unittest.mock import Mock, patch

import requests

from azal_watch.azal_fetcher import SEARCH_URL, AzalFetcher
from azal_watch.models import (
    NoFlightsAvailable,
    Success,
    TransportError,
    UnknownDomainError,
)
from azal_watch.search_params import (
    HEADER_FIELDS,
    QUERY_FIELDS,
    HeaderConfig,
    QueryConfig,
)


def make_payload():
    return {
        "warnings": [],
        "search": {
            "optionSets": [
                {
                    "options": [
                        {
                            "id": "a1",
                            "available": True,
                            "route": {"id": "J2-13", "departureDate": "2024-09-24T15:04:05"},
                        }
                    ]
                }
            ]
        },
    }


def mock_response(payload=None, status_code=200):
    resp = Mock(status_code=status_code)
    resp.json.return_value = payload
    return resp


@patch("requests.get")
def test_query_success(mock_get):
    mock_get.return_value = mock_response(make_payload())

    outcome = AzalFetcher("NAJ", "GYD").query("2024-09-24")

    assert isinstance(outcome, Success)
    assert len(outcome.options) == 1
    assert outcome.options[0].route_id == "J2-13"


@patch("requests.get")
def test_request_shape(mock_get):
    mock_get.return_value = mock_response(make_payload())

    AzalFetcher("NAJ", "GYD").query("2024-09-24")

    args, kwargs = mock_get.call_args
    assert args == (SEARCH_URL,)
    params = kwargs["params"]
    assert list(params) == [key for key, _ in QUERY_FIELDS]
    assert params["from"] == "NAJ"
    assert params["to"] == "GYD"
    assert params["departure_date"] == "2024-09-24"
    assert params["tripType"] == "OW"
    assert (params["adult_count"], params["child_count"], params["infant_count"]) == ("1", "0", "0")
    assert params["currency"] == "AZN"
    assert re.fullmatch(r"\d{13}", params["timestamp"])

    headers = kwargs["headers"]
    assert headers["Host"] == "book.azal.az"
    assert headers["x-application"] == "ibe"
    assert headers["TE"] == "trailers"
    # no default referer
    assert "Referer" not in headers
    assert kwargs["timeout"] is None


@patch("requests.get")
def test_header_overrides_and_pinned_timestamp(mock_get):
    mock_get.return_value = mock_response(make_payload())
    fetcher = AzalFetcher(
        "NAJ",
        "GYD",
        headers=HeaderConfig(referer="https://book.azal.az/", x_locale="en"),
        query=QueryConfig(lang="en", timestamp="1700000000000"),
        timeout=5,
    )
    fetcher.query("2024-09-24")

    kwargs = mock_get.call_args.kwargs
    assert kwargs["headers"]["Referer"] == "https://book.azal.az/"
    assert kwargs["headers"]["x-locale"] == "en"
    assert kwargs["params"]["lang"] == "en"
    assert kwargs["params"]["timestamp"] == "1700000000000"
    assert kwargs["timeout"] == 5


def test_header_table_covers_every_field():
    fields = set(HeaderConfig.model_fields)
    assert len(HEADER_FIELDS) == len(fields)
    conf = HeaderConfig()
    values = {accessor(conf) for _, accessor in HEADER_FIELDS}
    assert values == {getattr(conf, name) for name in fields}


@patch("requests.get")
def test_day_string_passes_through_unchanged(mock_get):
    mock_get.return_value = mock_response(make_payload())
    fetcher = AzalFetcher("NAJ", "GYD")
    for day in ("2024-01-05", "2024-12-31"):
        fetcher.query(day)
        sent = mock_get.call_args.kwargs["params"]["departure_date"]
        assert sent == day
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", sent)


@patch("requests.get")
def test_domain_errors(mock_get):
    mock_get.return_value = mock_response({"error": {"code": "no.flights.available", "text": ""}})
    assert isinstance(AzalFetcher("NAJ", "GYD").query("2024-09-24"), NoFlightsAvailable)

    mock_get.return_value = mock_response({"error": {"code": "internal", "text": ""}})
    outcome = AzalFetcher("NAJ", "GYD").query("2024-09-24")
    assert isinstance(outcome, UnknownDomainError)
    assert outcome.code == "internal"


@patch("requests.get")
def test_non_200_is_transport_error(mock_get):
    mock_get.return_value = mock_response(make_payload(), status_code=503)
    outcome = AzalFetcher("NAJ", "GYD").query("2024-09-24")
    assert isinstance(outcome, TransportError)
    assert "503" in outcome.cause


@patch("requests.get")
def test_connection_error_is_transport_error(mock_get):
    mock_get.side_effect = requests.ConnectionError("refused")
    outcome = AzalFetcher("NAJ", "GYD").query("2024-09-24")
    assert isinstance(outcome, TransportError)
    assert "refused" in outcome.cause


@patch("requests.get")
def test_malformed_bodies_are_transport_errors(mock_get):
    bad_json = Mock(status_code=200)
    bad_json.json.side_effect = ValueError("Expecting value")
    mock_get.return_value = bad_json
    assert isinstance(AzalFetcher("NAJ", "GYD").query("2024-09-24"), TransportError)

    mock_get.return_value = mock_response(["not", "an", "object"])
    assert isinstance(AzalFetcher("NAJ", "GYD").query("2024-09-24"), TransportError)

    payload = make_payload()
    payload["search"]["optionSets"][0]["options"][0]["route"]["departureDate"] = "24.09.2024"
    mock_get.return_value = mock_response(payload)
    assert isinstance(AzalFetcher("NAJ", "GYD").query("2024-09-24"), TransportError)


@patch("requests.get")
def test_no_retry(mock_get):
    mock_get.return_value = mock_response(None, status_code=500)
    AzalFetcher("NAJ", "GYD").query("2024-09-24")
    assert mock_get.call_count == 1

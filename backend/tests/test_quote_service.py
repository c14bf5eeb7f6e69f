import datetime
import logging
import random

from marketdesk.cache import TTLCache
from marketdesk.providers.base import Failure, FailureKind, QuoteProvider, Success
from marketdesk.schemas.quote import QuoteRecord
from marketdesk.services.quotes import QuoteService
from marketdesk.simulation import SIMULATED_QUOTE_SOURCE


def make_live_quote(symbol: str, source: str = "Test Live") -> QuoteRecord:
    return QuoteRecord(
        symbol=symbol,
        price=181.0,
        change=1.0,
        change_percent=0.55,
        volume=1000,
        high=182.0,
        low=179.0,
        open=180.0,
        previous_close=180.0,
        timestamp=datetime.datetime(2026, 1, 15, 15, 30, tzinfo=datetime.UTC),
        is_live=True,
        source=source,
    )


class RecordingFetch:
    def __init__(self, result) -> None:
        self.result = result
        self.calls: list[str] = []

    def __call__(self, symbol: str, api_key: str, timeout: float):
        self.calls.append(symbol)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def build_service(*providers: QuoteProvider, seed: int = 11) -> QuoteService:
    return QuoteService(list(providers), TTLCache(60), random.Random(seed))


def test_no_providers_configured_returns_simulated_quote() -> None:
    unconfigured = RecordingFetch(Success(make_live_quote("AAPL")))
    service = build_service(QuoteProvider("Alpha", None, unconfigured))

    lookup = service.fetch_quote("AAPL")

    assert lookup.quote.is_live is False
    assert lookup.quote.source == SIMULATED_QUOTE_SOURCE
    assert 174.6 <= lookup.quote.price <= 185.4
    assert lookup.error == "No quote provider configured"
    assert unconfigured.calls == []


def test_simulated_quotes_are_not_cached() -> None:
    service = build_service()

    first = service.get_quote("AAPL")
    second = service.get_quote("AAPL")

    assert first is not second
    assert first.price != second.price


def test_live_quote_is_cached_and_returned_identically() -> None:
    fetch = RecordingFetch(Success(make_live_quote("AAPL")))
    service = build_service(QuoteProvider("Alpha", "key", fetch))

    first = service.get_quote("aapl")
    second = service.get_quote("AAPL")

    assert first is second
    assert first.timestamp == second.timestamp
    assert fetch.calls == ["AAPL"]


def test_first_success_wins_in_priority_order() -> None:
    failing = RecordingFetch(Failure(FailureKind.RATE_LIMITED, "Alpha: rate limit exceeded"))
    succeeding = RecordingFetch(Success(make_live_quote("MSFT", source="Beta")))
    never_called = RecordingFetch(Success(make_live_quote("MSFT", source="Gamma")))
    service = build_service(
        QuoteProvider("Alpha", "key", failing),
        QuoteProvider("Beta", "key", succeeding),
        QuoteProvider("Gamma", "key", never_called),
    )

    lookup = service.fetch_quote("MSFT")

    assert lookup.quote.source == "Beta"
    assert lookup.error is None
    assert failing.calls == ["MSFT"]
    assert never_called.calls == []


def test_all_providers_failing_reports_last_reason() -> None:
    service = build_service(
        QuoteProvider("Alpha", "key", RecordingFetch(Failure(FailureKind.RATE_LIMITED, "first"))),
        QuoteProvider("Beta", "key", RecordingFetch(Failure(FailureKind.NETWORK_ERROR, "second"))),
    )

    lookup = service.fetch_quote("NVDA")

    assert lookup.quote.is_live is False
    assert lookup.error == "second"


def test_provider_exception_is_absorbed() -> None:
    service = build_service(QuoteProvider("Alpha", "key", RecordingFetch(KeyError("05. price"))))

    lookup = service.fetch_quote("AAPL")

    assert lookup.quote.is_live is False
    assert lookup.error is not None
    assert lookup.error.startswith("Alpha:")


def test_provider_exception_is_reported_as_provider_error(caplog) -> None:
    service = build_service(QuoteProvider("Alpha", "key", RecordingFetch(KeyError("05. price"))))

    with caplog.at_level(logging.WARNING, logger="marketdesk.services.quotes"):
        lookup = service.fetch_quote("AAPL")

    assert lookup.error == "Alpha: unexpected KeyError: '05. price'"
    assert "provider_error" in caplog.text
    assert "malformed_response" not in caplog.text


def test_live_and_simulated_quotes_share_field_set() -> None:
    live_service = build_service(
        QuoteProvider("Alpha", "key", RecordingFetch(Success(make_live_quote("AAPL"))))
    )
    simulated_service = build_service()

    live = live_service.get_quote("AAPL")
    simulated = simulated_service.get_quote("AAPL")

    assert set(live.model_dump()) == set(simulated.model_dump())

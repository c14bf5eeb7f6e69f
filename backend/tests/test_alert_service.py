import datetime
import random

import pytest

from marketdesk.cache import TTLCache
from marketdesk.parsing.headlines import classify_headline, create_alert_title, format_time_ago
from marketdesk.providers.base import Failure, FailureKind, NewsProvider, Success
from marketdesk.schemas.alert import AlertRecord
from marketdesk.services.alerts import AlertService
from marketdesk.simulation import SIMULATED_ALERT_SOURCE

NOW = datetime.datetime(2026, 1, 15, 15, 30, tzinfo=datetime.UTC)


def make_alerts(source: str, minutes: list[int]) -> list[AlertRecord]:
    return [
        AlertRecord(
            id=f"{source}-{offset}",
            title=f"{source} headline {offset}",
            type="neutral",
            timestamp=NOW - datetime.timedelta(minutes=offset),
            source=source,
            is_live=True,
        )
        for offset in minutes
    ]


def fixed_fetch(result):
    def fetch(api_key: str, limit: int, timeout: float):
        return result

    return fetch


def build_service(*providers: NewsProvider) -> AlertService:
    return AlertService(list(providers), TTLCache(300), random.Random(4), clock=lambda: NOW)


@pytest.mark.parametrize(
    "headline, expected",
    [
        ("Stock surges after earnings beat", "bullish"),
        ("Shares plunge on guidance cut", "bearish"),
        ("Company names new CFO", "neutral"),
        ("Markets decline as oil falls", "bearish"),
        ("Bond yields RISE on jobs data", "bullish"),
    ],
)
def test_classify_headline(headline: str, expected: str) -> None:
    assert classify_headline(headline) == expected


@pytest.mark.parametrize(
    "delta, expected",
    [
        (datetime.timedelta(seconds=30), "Just now"),
        (datetime.timedelta(minutes=5), "5 mins ago"),
        (datetime.timedelta(minutes=90), "1 hour ago"),
        (datetime.timedelta(hours=5), "5 hours ago"),
        (datetime.timedelta(hours=30), "1 day ago"),
        (datetime.timedelta(hours=50), "2 days ago"),
    ],
)
def test_format_time_ago(delta: datetime.timedelta, expected: str) -> None:
    assert format_time_ago(NOW - delta, now=NOW) == expected


def test_create_alert_title_truncates_and_prefixes() -> None:
    headline = "x" * 120

    assert create_alert_title(headline) == "x" * 80
    assert create_alert_title("Guidance cut", [{"ticker": "TSLA", "ticker_sentiment_score": "-0.5"}]) == (
        "TSLA facing bearish pressure - Guidance cut"
    )
    assert create_alert_title("Flat day", [{"ticker": "TSLA", "ticker_sentiment_score": "0.1"}]) == "Flat day"


def test_alerts_are_union_of_all_providers_sorted_and_truncated() -> None:
    service = build_service(
        NewsProvider("Alpha", "key", fixed_fetch(Success(make_alerts("Alpha", [1, 20, 40, 60, 80])))),
        NewsProvider("Beta", "key", fixed_fetch(Success(make_alerts("Beta", [5, 10, 30, 50, 70, 90])))),
    )

    alerts = service.get_alerts()

    assert len(alerts) == 10
    assert {alert.source for alert in alerts} == {"Alpha", "Beta"}
    timestamps = [alert.timestamp for alert in alerts]
    assert timestamps == sorted(timestamps, reverse=True)
    # Beta contributes at most five items, so its 90 minute item never appears.
    assert "Beta-90" not in {alert.id for alert in alerts}


def test_failed_provider_does_not_block_others() -> None:
    service = build_service(
        NewsProvider("Alpha", "key", fixed_fetch(Failure(FailureKind.NETWORK_ERROR, "down"))),
        NewsProvider("Beta", "key", fixed_fetch(Success(make_alerts("Beta", [3, 6])))),
    )

    alerts = service.get_alerts()

    assert [alert.id for alert in alerts] == ["Beta-3", "Beta-6"]


def test_empty_union_falls_back_to_simulation() -> None:
    service = build_service(
        NewsProvider("Alpha", None, fixed_fetch(Success(make_alerts("Alpha", [1])))),
        NewsProvider("Beta", "key", fixed_fetch(Success([]))),
    )

    alerts = service.get_alerts()

    assert len(alerts) == 6
    assert all(alert.source == SIMULATED_ALERT_SOURCE for alert in alerts)
    assert all(alert.is_live is False for alert in alerts)
    timestamps = [alert.timestamp for alert in alerts]
    assert timestamps == sorted(timestamps, reverse=True)


def test_alerts_are_cached_between_calls() -> None:
    calls: list[int] = []

    def fetch(api_key: str, limit: int, timeout: float):
        calls.append(limit)
        return Success(make_alerts("Alpha", [1, 2]))

    service = build_service(NewsProvider("Alpha", "key", fetch))

    first = service.get_alerts()
    second = service.get_alerts()

    assert first is second
    assert calls == [5]

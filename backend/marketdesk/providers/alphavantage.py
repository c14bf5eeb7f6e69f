from __future__ import annotations

import datetime

from marketdesk.parsing.headlines import classify_headline, classify_score, create_alert_title
from marketdesk.providers.base import (
    Failure,
    FailureKind,
    ProviderResult,
    Success,
    build_url,
    parse_float,
    request_json,
)
from marketdesk.schemas.alert import AlertRecord
from marketdesk.schemas.quote import QuoteRecord

NAME = "Alpha Vantage"
_BASE_URL = "https://www.alphavantage.co"
_QUERY_PATH = "/query"
_NEWS_TOPIC = "financial_markets"
_PUBLISHED_FORMAT = "%Y%m%dT%H%M%S"


def _classify_payload(payload: object) -> Failure | None:
    if not isinstance(payload, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unexpected payload type")
    if payload.get("Information"):
        return Failure(FailureKind.RATE_LIMITED, f"{NAME}: rate limit exceeded - {payload['Information']}")
    if payload.get("Note"):
        return Failure(FailureKind.RATE_LIMITED, f"{NAME}: {payload['Note']}")
    if payload.get("Error Message"):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: API error - {payload['Error Message']}")
    return None


def parse_quote(payload: dict, now: datetime.datetime | None = None) -> ProviderResult[QuoteRecord]:
    quote = payload.get("Global Quote")
    if quote is None:
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: invalid response format")
    if not quote:
        return Failure(FailureKind.EMPTY_RESPONSE, f"{NAME}: no quote data returned")

    try:
        record = QuoteRecord(
            symbol=quote["01. symbol"],
            price=parse_float(quote["05. price"]),
            change=parse_float(quote["09. change"]),
            change_percent=parse_float(quote["10. change percent"]),
            volume=int(quote["06. volume"]),
            high=parse_float(quote["03. high"]),
            low=parse_float(quote["04. low"]),
            open=parse_float(quote["02. open"]),
            previous_close=parse_float(quote["08. previous close"]),
            timestamp=now or datetime.datetime.now(datetime.UTC),
            is_live=True,
            source=NAME,
        )
    except (KeyError, TypeError, ValueError) as exc:
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unparseable quote field {exc}")
    return Success(record)


def fetch_quote(symbol: str, api_key: str, timeout: float = 10.0) -> ProviderResult[QuoteRecord]:
    url = build_url(
        _BASE_URL,
        _QUERY_PATH,
        {"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": api_key},
    )
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    failure = _classify_payload(result.value)
    if failure:
        return failure
    return parse_quote(result.value)


def _parse_published(raw_value: str) -> datetime.datetime:
    parsed = datetime.datetime.strptime(raw_value, _PUBLISHED_FORMAT)
    return parsed.replace(tzinfo=datetime.UTC)


def _article_type(article: dict) -> str:
    raw_score = article.get("overall_sentiment_score")
    if raw_score is not None and raw_score != "":
        try:
            return classify_score(parse_float(raw_score))
        except (TypeError, ValueError):
            pass
    return classify_headline(article["title"])


def parse_news(payload: dict, limit: int = 5) -> ProviderResult[list[AlertRecord]]:
    feed = payload.get("feed")
    if feed is None:
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: news payload has no feed")
    if not isinstance(feed, list):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: news feed is not a list")

    alerts: list[AlertRecord] = []
    for article in feed[:limit]:
        try:
            alerts.append(
                AlertRecord(
                    id=str(article["url"]),
                    title=create_alert_title(article["title"], article.get("ticker_sentiment")),
                    type=_article_type(article),
                    timestamp=_parse_published(article["time_published"]),
                    source=NAME,
                    is_live=True,
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError):
            continue
    return Success(alerts)


def fetch_news(api_key: str, limit: int = 5, timeout: float = 10.0) -> ProviderResult[list[AlertRecord]]:
    url = build_url(
        _BASE_URL,
        _QUERY_PATH,
        {"function": "NEWS_SENTIMENT", "topics": _NEWS_TOPIC, "apikey": api_key},
    )
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    failure = _classify_payload(result.value)
    if failure:
        return failure
    return parse_news(result.value, limit)

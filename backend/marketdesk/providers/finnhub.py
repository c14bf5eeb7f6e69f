from __future__ import annotations

import datetime

from marketdesk.parsing.headlines import classify_headline, create_alert_title
from marketdesk.providers.base import (
    Failure,
    FailureKind,
    ProviderResult,
    Success,
    build_url,
    request_json,
)
from marketdesk.schemas.alert import AlertRecord
from marketdesk.schemas.quote import CompanyFundamentals, QuoteRecord
from marketdesk.schemas.research import CompanyNewsItem, NewsSentiment

NAME = "Finnhub"
_BASE_URL = "https://finnhub.io"
_QUOTE_PATH = "/api/v1/quote"
_NEWS_PATH = "/api/v1/news"
_METRIC_PATH = "/api/v1/stock/metric"
_COMPANY_NEWS_PATH = "/api/v1/company-news"
_SENTIMENT_PATH = "/api/v1/news-sentiment"
COMPANY_NEWS_LIMIT = 10


def _error_failure(payload: object) -> Failure | None:
    if not isinstance(payload, dict):
        return None
    if payload.get("error"):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: API error - {payload['error']}")
    return None


def parse_quote(symbol: str, payload: object) -> ProviderResult[QuoteRecord]:
    if not isinstance(payload, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unexpected payload type")
    failure = _error_failure(payload)
    if failure:
        return failure

    # Unknown symbols come back as an all-zero quote.
    if not payload.get("c") and not payload.get("pc"):
        return Failure(FailureKind.EMPTY_RESPONSE, f"{NAME}: no quote data for {symbol}")

    try:
        price = float(payload["c"])
        previous_close = float(payload.get("pc") or 0.0)
        change = float(payload.get("d") or 0.0)
        change_percent = float(payload.get("dp") or 0.0)
        quoted_at = payload.get("t")
        timestamp = (
            datetime.datetime.fromtimestamp(int(quoted_at), tz=datetime.UTC)
            if quoted_at
            else datetime.datetime.now(datetime.UTC)
        )
        record = QuoteRecord(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=0,
            high=float(payload.get("h") or price),
            low=float(payload.get("l") or price),
            open=float(payload.get("o") or price),
            previous_close=previous_close,
            timestamp=timestamp,
            is_live=True,
            source=NAME,
        )
    except (KeyError, TypeError, ValueError) as exc:
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unparseable quote field {exc}")
    return Success(record)


def fetch_quote(symbol: str, api_key: str, timeout: float = 10.0) -> ProviderResult[QuoteRecord]:
    url = build_url(_BASE_URL, _QUOTE_PATH, {"symbol": symbol, "token": api_key})
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    return parse_quote(symbol, result.value)


def parse_news(payload: object, limit: int = 5) -> ProviderResult[list[AlertRecord]]:
    failure = _error_failure(payload)
    if failure:
        return failure
    if not isinstance(payload, list):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: news payload is not a list")

    alerts: list[AlertRecord] = []
    for article in payload[:limit]:
        try:
            headline = article["headline"]
            alerts.append(
                AlertRecord(
                    id=str(article["id"]),
                    title=create_alert_title(headline),
                    type=classify_headline(headline),
                    timestamp=datetime.datetime.fromtimestamp(int(article["datetime"]), tz=datetime.UTC),
                    source=NAME,
                    is_live=True,
                )
            )
        except (KeyError, TypeError, ValueError):
            continue
    return Success(alerts)


def fetch_news(api_key: str, limit: int = 5, timeout: float = 10.0) -> ProviderResult[list[AlertRecord]]:
    url = build_url(_BASE_URL, _NEWS_PATH, {"category": "general", "token": api_key})
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    return parse_news(result.value, limit)


def _optional_float(value: object) -> float | None:
    if isinstance(value, (int, float)):
        return float(value)
    return None


def parse_fundamentals(symbol: str, payload: object) -> ProviderResult[CompanyFundamentals]:
    if not isinstance(payload, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unexpected payload type")
    failure = _error_failure(payload)
    if failure:
        return failure
    metric = payload.get("metric")
    if not isinstance(metric, dict) or not metric:
        return Failure(FailureKind.EMPTY_RESPONSE, f"{NAME}: no fundamentals for {symbol}")

    return Success(
        CompanyFundamentals(
            symbol=symbol,
            pe_ratio=_optional_float(metric.get("peNormalizedAnnual")),
            pb_ratio=_optional_float(metric.get("pbAnnual")),
            market_cap=_optional_float(metric.get("marketCapitalization")),
            roe=_optional_float(metric.get("roeRfy")),
            roa=_optional_float(metric.get("roaRfy")),
            debt_to_equity=_optional_float(metric.get("totalDebt2TotalEquityAnnual")),
            current_ratio=_optional_float(metric.get("currentRatioAnnual")),
            revenue_growth=_optional_float(metric.get("revenueGrowthTTMYoy")),
            eps_growth=_optional_float(metric.get("epsGrowthTTMYoy")),
        )
    )


def fetch_fundamentals(
    symbol: str, api_key: str, timeout: float = 10.0
) -> ProviderResult[CompanyFundamentals]:
    url = build_url(_BASE_URL, _METRIC_PATH, {"symbol": symbol, "metric": "all", "token": api_key})
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    return parse_fundamentals(symbol, result.value)


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_company_news(
    payload: object, limit: int = COMPANY_NEWS_LIMIT
) -> ProviderResult[list[CompanyNewsItem]]:
    failure = _error_failure(payload)
    if failure:
        return failure
    if not isinstance(payload, list):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: company news payload is not a list")

    items: list[CompanyNewsItem] = []
    for article in payload[:limit]:
        try:
            headline = article["headline"]
            items.append(
                CompanyNewsItem(
                    headline=headline,
                    summary=_optional_text(article.get("summary")),
                    url=_optional_text(article.get("url")),
                    source=_optional_text(article.get("source")),
                    published_at=datetime.datetime.fromtimestamp(
                        int(article["datetime"]), tz=datetime.UTC
                    ),
                    type=classify_headline(headline),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError):
            continue
    return Success(items)


def fetch_company_news(
    symbol: str,
    api_key: str,
    timeout: float = 10.0,
    lookback_days: int = 30,
    today: datetime.date | None = None,
) -> ProviderResult[list[CompanyNewsItem]]:
    end = today or datetime.datetime.now(datetime.UTC).date()
    start = end - datetime.timedelta(days=lookback_days)
    url = build_url(
        _BASE_URL,
        _COMPANY_NEWS_PATH,
        {"symbol": symbol, "from": start.isoformat(), "to": end.isoformat(), "token": api_key},
    )
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    return parse_company_news(result.value)


def parse_news_sentiment(symbol: str, payload: object) -> ProviderResult[NewsSentiment]:
    if not isinstance(payload, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unexpected payload type")
    failure = _error_failure(payload)
    if failure:
        return failure
    if not payload.get("buzz") and not payload.get("sentiment"):
        return Failure(FailureKind.EMPTY_RESPONSE, f"{NAME}: no news sentiment for {symbol}")

    buzz = payload.get("buzz") if isinstance(payload.get("buzz"), dict) else {}
    sentiment = payload.get("sentiment") if isinstance(payload.get("sentiment"), dict) else {}
    articles = buzz.get("articlesInLastWeek")
    return Success(
        NewsSentiment(
            symbol=symbol,
            buzz=_optional_float(buzz.get("buzz")),
            articles_in_last_week=int(articles) if isinstance(articles, (int, float)) else None,
            bullish_percent=_optional_float(sentiment.get("bullishPercent")),
            bearish_percent=_optional_float(sentiment.get("bearishPercent")),
            company_news_score=_optional_float(payload.get("companyNewsScore")),
            sector_average_news_score=_optional_float(payload.get("sectorAverageNewsScore")),
        )
    )


def fetch_news_sentiment(
    symbol: str, api_key: str, timeout: float = 10.0
) -> ProviderResult[NewsSentiment]:
    url = build_url(_BASE_URL, _SENTIMENT_PATH, {"symbol": symbol, "token": api_key})
    result = request_json(url, timeout=timeout, provider=NAME)
    if isinstance(result, Failure):
        return result
    return parse_news_sentiment(symbol, result.value)

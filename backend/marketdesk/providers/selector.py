from __future__ import annotations

from marketdesk.config.settings import Settings
from marketdesk.providers import alphavantage, finnhub
from marketdesk.providers.base import NewsProvider, QuoteProvider


def build_quote_providers(settings: Settings) -> list[QuoteProvider]:
    """Quote providers in priority order; unconfigured ones are kept and skipped later."""
    keys = settings.providers
    timeout = keys.request_timeout_seconds
    return [
        QuoteProvider(alphavantage.NAME, keys.alpha_vantage_api_key, alphavantage.fetch_quote, timeout),
        QuoteProvider(finnhub.NAME, keys.finnhub_api_key, finnhub.fetch_quote, timeout),
    ]


def build_news_providers(settings: Settings) -> list[NewsProvider]:
    keys = settings.providers
    timeout = keys.request_timeout_seconds
    return [
        NewsProvider(alphavantage.NAME, keys.alpha_vantage_api_key, alphavantage.fetch_news, timeout),
        NewsProvider(finnhub.NAME, keys.finnhub_api_key, finnhub.fetch_news, timeout),
    ]

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import lru_cache

from marketdesk.cache import TTLCache
from marketdesk.config.settings import Settings, settings
from marketdesk.llm.client import AnalysisTextClient
from marketdesk.providers.selector import build_news_providers, build_quote_providers
from marketdesk.services.alerts import AlertService
from marketdesk.services.batch import BatchCoordinator
from marketdesk.services.quotes import QuoteService
from marketdesk.services.reports import ReportService


@dataclass
class MarketServices:
    settings: Settings
    quotes: QuoteService
    alerts: AlertService
    batch: BatchCoordinator
    reports: ReportService


def build_services(app_settings: Settings, rng: random.Random | None = None) -> MarketServices:
    rng = rng or random.Random()
    quotes = QuoteService(
        build_quote_providers(app_settings),
        TTLCache(app_settings.cache.quote_ttl_seconds),
        rng,
    )
    alerts = AlertService(
        build_news_providers(app_settings),
        TTLCache(app_settings.cache.alert_ttl_seconds),
        rng,
        per_provider_limit=app_settings.alerts.per_provider_limit,
        max_alerts=app_settings.alerts.max_alerts,
    )
    return MarketServices(
        settings=app_settings,
        quotes=quotes,
        alerts=alerts,
        batch=BatchCoordinator(quotes),
        reports=ReportService(AnalysisTextClient(app_settings), rng),
    )


@lru_cache(maxsize=1)
def get_services() -> MarketServices:
    """FastAPI dependency returning the process-wide service handles."""
    return build_services(settings)

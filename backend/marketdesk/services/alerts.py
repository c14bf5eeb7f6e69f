from __future__ import annotations

import datetime
import logging
import random
from typing import Callable

from marketdesk.cache import TTLCache
from marketdesk.providers.base import Failure, NewsProvider
from marketdesk.schemas.alert import AlertRecord
from marketdesk.simulation import simulate_alerts

logger = logging.getLogger(__name__)

ALERTS_CACHE_KEY = "market_alerts"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class AlertService:
    """Union of every configured news provider, newest first.

    Unlike quotes, providers are not short-circuited: each one that answers
    contributes its items before the global sort and truncation.
    """

    def __init__(
        self,
        providers: list[NewsProvider],
        cache: TTLCache[list[AlertRecord]],
        rng: random.Random | None = None,
        per_provider_limit: int = 5,
        max_alerts: int = 10,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self._providers = providers
        self._cache = cache
        self._rng = rng or random.Random()
        self._per_provider_limit = per_provider_limit
        self._max_alerts = max_alerts
        self._clock = clock

    def _collect(self) -> list[AlertRecord]:
        alerts: list[AlertRecord] = []
        for provider in self._providers:
            if not provider.configured:
                continue
            try:
                result = provider.fetch_alerts(self._per_provider_limit)
            except Exception as exc:
                logger.warning("News provider %s raised: %s", provider.name, exc)
                continue
            if isinstance(result, Failure):
                logger.warning(
                    "News provider %s failed (%s): %s", provider.name, result.kind.value, result.reason
                )
                continue
            alerts.extend(result.value[: self._per_provider_limit])
        return alerts

    def get_alerts(self) -> list[AlertRecord]:
        cached = self._cache.get(ALERTS_CACHE_KEY)
        if cached is not None:
            return cached

        alerts = self._collect()
        if not alerts:
            logger.warning("No live alerts available, using simulated market alerts")
            alerts = simulate_alerts(self._rng, self._clock())

        alerts = sorted(alerts, key=lambda alert: alert.timestamp, reverse=True)[: self._max_alerts]
        self._cache.set(ALERTS_CACHE_KEY, alerts)
        return alerts

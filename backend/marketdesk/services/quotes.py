from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from marketdesk.cache import TTLCache
from marketdesk.providers.base import Failure, FailureKind, QuoteProvider, Success
from marketdesk.schemas.quote import QuoteRecord
from marketdesk.simulation import simulate_quote

logger = logging.getLogger(__name__)


@dataclass
class QuoteLookup:
    quote: QuoteRecord
    error: str | None = None


def quote_cache_key(symbol: str) -> str:
    return f"quote:{symbol}"


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


class QuoteService:
    """First-success-wins quote chain with a simulated fallback.

    Live quotes are cached; simulated ones never are, so a provider outage
    yields a fresh draw on every call.
    """

    def __init__(
        self,
        providers: list[QuoteProvider],
        cache: TTLCache[QuoteRecord],
        rng: random.Random | None = None,
    ) -> None:
        self._providers = providers
        self._cache = cache
        self._rng = rng or random.Random()

    def _try_provider(self, provider: QuoteProvider, symbol: str) -> Success[QuoteRecord] | Failure:
        try:
            return provider.fetch_quote(symbol)
        except Exception as exc:
            return Failure(
                FailureKind.PROVIDER_ERROR,
                f"{provider.name}: unexpected {type(exc).__name__}: {exc}",
            )

    def fetch_quote(self, symbol: str) -> QuoteLookup:
        symbol = normalize_symbol(symbol)
        cache_key = quote_cache_key(symbol)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return QuoteLookup(quote=cached)

        failure: Failure | None = None
        for provider in self._providers:
            if not provider.configured:
                continue
            result = self._try_provider(provider, symbol)
            if isinstance(result, Success):
                self._cache.set(cache_key, result.value)
                return QuoteLookup(quote=result.value)
            failure = result
            logger.warning(
                "Quote provider %s failed for %s (%s): %s",
                provider.name,
                symbol,
                result.kind.value,
                result.reason,
            )

        if failure is None:
            failure = Failure(FailureKind.NO_PROVIDER_CONFIGURED, "No quote provider configured")
        logger.warning("Using simulated quote for %s: %s", symbol, failure.reason)
        return QuoteLookup(quote=self.simulate(symbol), error=failure.reason)

    def get_quote(self, symbol: str) -> QuoteRecord:
        return self.fetch_quote(symbol).quote

    def simulate(self, symbol: str) -> QuoteRecord:
        return simulate_quote(normalize_symbol(symbol), self._rng)

import asyncio
import random

from marketdesk.cache import TTLCache
from marketdesk.providers.base import Failure, FailureKind, QuoteProvider
from marketdesk.services.batch import BatchCoordinator
from marketdesk.services.quotes import QuoteLookup, QuoteService


def unreachable(symbol: str, api_key: str, timeout: float):
    return Failure(FailureKind.NETWORK_ERROR, "Alpha: connection refused")


class ExplodingQuoteService(QuoteService):
    def fetch_quote(self, symbol: str) -> QuoteLookup:
        if symbol == "BOOM":
            raise RuntimeError("worker crashed")
        return super().fetch_quote(symbol)


def test_batch_preserves_order_and_always_has_data() -> None:
    quotes = QuoteService([QuoteProvider("Alpha", "key", unreachable)], TTLCache(60), random.Random(2))
    coordinator = BatchCoordinator(quotes)

    items = asyncio.run(coordinator.get_batch(["AAPL", "ZZZZ"]))

    assert [item.symbol for item in items] == ["AAPL", "ZZZZ"]
    assert all(item.data is not None for item in items)
    assert all(item.data.is_live is False for item in items)
    assert all(item.error == "Alpha: connection refused" for item in items)
    assert 174.6 <= items[0].data.price <= 185.4
    assert 97.0 <= items[1].data.price <= 103.0


def test_batch_isolates_failing_task() -> None:
    quotes = ExplodingQuoteService([], TTLCache(60), random.Random(3))
    coordinator = BatchCoordinator(quotes)

    items = asyncio.run(coordinator.get_batch(["MSFT", "BOOM", "NVDA"]))

    assert len(items) == 3
    assert [item.symbol for item in items] == ["MSFT", "BOOM", "NVDA"]
    assert items[1].error == "worker crashed"
    assert items[1].data.symbol == "BOOM"
    assert items[0].error == "No quote provider configured"
    assert items[2].data is not None


def test_run_batch_handles_empty_input() -> None:
    coordinator = BatchCoordinator(QuoteService([], TTLCache(60), random.Random(1)))

    assert coordinator.run_batch([]) == []

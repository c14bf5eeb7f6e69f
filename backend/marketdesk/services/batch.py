from __future__ import annotations

import asyncio
import logging

from marketdesk.schemas.quote import BatchItem
from marketdesk.services.quotes import QuoteService

logger = logging.getLogger(__name__)


class BatchCoordinator:
    def __init__(self, quotes: QuoteService) -> None:
        self._quotes = quotes

    async def get_batch(self, symbols: list[str]) -> list[BatchItem]:
        tasks = [asyncio.to_thread(self._quotes.fetch_quote, symbol) for symbol in symbols]
        # All-settled: one failing symbol never cancels its siblings.
        results = await asyncio.gather(*tasks, return_exceptions=True)

        items: list[BatchItem] = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                logger.warning("Batch fetch for %s raised: %r", symbol, result)
                items.append(
                    BatchItem(
                        symbol=symbol,
                        data=self._quotes.simulate(symbol),
                        error=str(result) or type(result).__name__,
                    )
                )
                continue
            items.append(BatchItem(symbol=symbol, data=result.quote, error=result.error))
        return items

    def run_batch(self, symbols: list[str]) -> list[BatchItem]:
        return asyncio.run(self.get_batch(symbols))

from __future__ import annotations

import logging

from marketdesk.config.settings import settings
from marketdesk.services.container import build_services

logger = logging.getLogger(__name__)


def run_batch_refresh(symbols: list[str]) -> list[dict]:
    # Workers run in their own process, so the quote cache starts cold here.
    services = build_services(settings)
    items = services.batch.run_batch(symbols)
    simulated = sum(1 for item in items if not item.data.is_live)
    logger.info("Batch refresh finished: %d symbols, %d simulated", len(items), simulated)
    return [item.model_dump(mode="json") for item in items]

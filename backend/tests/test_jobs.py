from unittest.mock import Mock, patch

from marketdesk.config.settings import settings
from marketdesk.jobs.batch_refresh import run_batch_refresh
from marketdesk.jobs.queue import enqueue_batch_refresh


def test_enqueue_batch_refresh_uses_configured_queue() -> None:
    queue = Mock()
    queue.enqueue.return_value = Mock(id="job-1")

    with patch("marketdesk.jobs.queue.get_queue", return_value=queue):
        job = enqueue_batch_refresh(["AAPL", "MSFT"])

    queue.enqueue.assert_called_once_with(run_batch_refresh, symbols=["AAPL", "MSFT"])
    assert job.id == "job-1"


def test_run_batch_refresh_returns_serializable_items() -> None:
    previous_alpha = settings.providers.alpha_vantage_api_key
    previous_finnhub = settings.providers.finnhub_api_key
    settings.providers.alpha_vantage_api_key = None
    settings.providers.finnhub_api_key = None
    try:
        items = run_batch_refresh(["AAPL", "ZZZZ"])
    finally:
        settings.providers.alpha_vantage_api_key = previous_alpha
        settings.providers.finnhub_api_key = previous_finnhub

    assert [item["symbol"] for item in items] == ["AAPL", "ZZZZ"]
    assert all(item["data"]["is_live"] is False for item in items)
    assert all(isinstance(item["data"]["timestamp"], str) for item in items)

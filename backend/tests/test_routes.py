import asyncio
import random
from unittest.mock import Mock, patch

import pytest
from fastapi import HTTPException
from rq.exceptions import NoSuchJobError

from marketdesk.api.routes import (
    create_report,
    enqueue_quote_batch,
    get_alerts,
    get_company_news,
    get_fundamentals,
    get_job,
    get_quote,
    get_quote_batch,
    get_sec_filings,
)
from marketdesk.config.settings import Settings
from marketdesk.errors import ReportGenerationError
from marketdesk.providers.base import Failure, FailureKind, Success
from marketdesk.schemas.quote import BatchRequest
from marketdesk.schemas.report import ReportRequest
from marketdesk.schemas.research import NewsSentiment, SecCompany, SecFilings
from marketdesk.services.container import build_services


def build_offline_services():
    app_settings = Settings()
    app_settings.providers.alpha_vantage_api_key = None
    app_settings.providers.finnhub_api_key = None
    app_settings.providers.openai_api_key = None
    return build_services(app_settings, random.Random(21))


def test_get_quote_without_providers_is_simulated() -> None:
    services = build_offline_services()

    quote = get_quote(" aapl ", services=services)

    assert quote.symbol == "AAPL"
    assert quote.is_live is False
    assert quote.source == "Simulated (Rate Limited)"


def test_get_quote_rejects_blank_symbol() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_quote("  ", services=build_offline_services())

    assert excinfo.value.status_code == 400


def test_batch_endpoint_returns_items_in_order() -> None:
    services = build_offline_services()

    items = asyncio.run(get_quote_batch(BatchRequest(symbols=["AAPL", "zzzz"]), services=services))

    assert [item.symbol for item in items] == ["AAPL", "ZZZZ"]
    assert all(item.data is not None for item in items)
    assert all(item.error == "No quote provider configured" for item in items)


def test_batch_endpoint_rejects_empty_request() -> None:
    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(get_quote_batch(BatchRequest(symbols=[]), services=build_offline_services()))

    assert excinfo.value.status_code == 400


def test_alerts_endpoint_adds_time_labels() -> None:
    alerts = get_alerts(services=build_offline_services())

    assert 0 < len(alerts) <= 10
    timestamps = [alert.timestamp for alert in alerts]
    assert timestamps == sorted(timestamps, reverse=True)
    assert all(alert.time_ago for alert in alerts)


def test_fundamentals_require_finnhub_key() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_fundamentals("AAPL", services=build_offline_services())

    assert excinfo.value.status_code == 503


def test_report_failure_maps_to_bad_gateway() -> None:
    services = build_offline_services()

    with pytest.raises(HTTPException) as excinfo:
        create_report(ReportRequest(symbol="AAPL", name="Apple Inc."), services=services)

    assert excinfo.value.status_code == 502
    assert "OpenAI API key is required" in excinfo.value.detail["reason"]


def test_report_uses_quote_context() -> None:
    services = build_offline_services()
    generated = Mock()

    with patch.object(services.reports, "generate", return_value=generated) as generate_mock:
        result = create_report(
            ReportRequest(symbol="nvda", name="NVIDIA", sector="Technology", market_cap="$1.1T"),
            services=services,
        )

    stock = generate_mock.call_args.args[0]
    assert result is generated
    assert stock.symbol == "NVDA"
    assert stock.sector == "Technology"
    assert 436.5 <= stock.price <= 463.5


def test_report_generation_error_from_service() -> None:
    services = build_offline_services()

    with patch.object(services.reports, "generate", side_effect=ReportGenerationError("no text")):
        with pytest.raises(HTTPException) as excinfo:
            create_report(ReportRequest(symbol="AAPL", name="Apple"), services=services)

    assert excinfo.value.detail["reason"] == "no text"


def test_batch_job_is_enqueued() -> None:
    job = Mock()
    job.id = "job-123"

    with patch("marketdesk.api.routes.enqueue_batch_refresh", return_value=job) as enqueue_mock:
        result = enqueue_quote_batch(BatchRequest(symbols=["aapl", "msft"]))

    enqueue_mock.assert_called_once_with(["AAPL", "MSFT"])
    assert result.job_id == "job-123"
    assert result.status == "queued"


def test_finished_job_returns_result() -> None:
    job = Mock()
    job.id = "job-456"
    job.get_status.return_value = "finished"
    job.return_value.return_value = [{"symbol": "AAPL"}]

    with patch("marketdesk.api.routes.fetch_job", return_value=job):
        result = get_job("job-456")

    assert result.status == "finished"
    assert result.result == [{"symbol": "AAPL"}]


def test_unknown_job_is_not_found() -> None:
    with patch("marketdesk.api.routes.fetch_job", side_effect=NoSuchJobError("missing")):
        with pytest.raises(HTTPException) as excinfo:
            get_job("nope")

    assert excinfo.value.status_code == 404


def build_finnhub_services():
    services = build_offline_services()
    services.settings.providers.finnhub_api_key = "finnhub-key"
    return services


def test_company_news_requires_finnhub_key() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_company_news("AAPL", services=build_offline_services())

    assert excinfo.value.status_code == 503


def test_company_news_includes_sentiment() -> None:
    sentiment = NewsSentiment(symbol="AAPL", company_news_score=0.71)

    with (
        patch("marketdesk.api.routes.finnhub.fetch_company_news", return_value=Success([])) as news_mock,
        patch("marketdesk.api.routes.finnhub.fetch_news_sentiment", return_value=Success(sentiment)),
    ):
        report = get_company_news(" aapl", services=build_finnhub_services())

    assert news_mock.call_args.args[:2] == ("AAPL", "finnhub-key")
    assert report.symbol == "AAPL"
    assert report.sentiment == sentiment
    assert report.sentiment_error is None


def test_company_news_survives_missing_sentiment() -> None:
    denied = Failure(FailureKind.MALFORMED_RESPONSE, "Finnhub: API error - no access")

    with (
        patch("marketdesk.api.routes.finnhub.fetch_company_news", return_value=Success([])),
        patch("marketdesk.api.routes.finnhub.fetch_news_sentiment", return_value=denied),
    ):
        report = get_company_news("AAPL", services=build_finnhub_services())

    assert report.sentiment is None
    assert report.sentiment_error == "Finnhub: API error - no access"


def test_company_news_failure_maps_to_bad_gateway() -> None:
    failure = Failure(FailureKind.RATE_LIMITED, "Finnhub: rate limit exceeded (HTTP 429)")

    with patch("marketdesk.api.routes.finnhub.fetch_company_news", return_value=failure):
        with pytest.raises(HTTPException) as excinfo:
            get_company_news("AAPL", services=build_finnhub_services())

    assert excinfo.value.status_code == 502
    assert excinfo.value.detail["kind"] == "rate_limited"


def test_sec_filings_pads_cik_and_uses_user_agent() -> None:
    services = build_offline_services()
    filings = SecFilings(company=SecCompany(cik="0000320193", name="Apple Inc."))

    with patch("marketdesk.api.routes.edgar.fetch_filings", return_value=Success(filings)) as fetch_mock:
        result = get_sec_filings("320193", services=services)

    assert result is filings
    cik, user_agent, _timeout = fetch_mock.call_args.args
    assert cik == "0000320193"
    assert user_agent == services.settings.providers.sec_user_agent


def test_sec_filings_rejects_ticker() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_sec_filings("AAPL", services=build_offline_services())

    assert excinfo.value.status_code == 400


def test_sec_filings_failure_maps_to_bad_gateway() -> None:
    failure = Failure(FailureKind.NETWORK_ERROR, "SEC EDGAR: HTTP 403")

    with patch("marketdesk.api.routes.edgar.fetch_filings", return_value=failure):
        with pytest.raises(HTTPException) as excinfo:
            get_sec_filings("320193", services=build_offline_services())

    assert excinfo.value.status_code == 502
    assert excinfo.value.detail["reason"] == "SEC EDGAR: HTTP 403"

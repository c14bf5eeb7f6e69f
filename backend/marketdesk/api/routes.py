from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from rq.exceptions import NoSuchJobError

from marketdesk.errors import ReportGenerationError
from marketdesk.jobs.queue import enqueue_batch_refresh, fetch_job
from marketdesk.parsing.headlines import format_time_ago
from marketdesk.providers import edgar, finnhub
from marketdesk.providers.base import Failure
from marketdesk.schemas.alert import AlertView
from marketdesk.schemas.job import JobResponse
from marketdesk.schemas.quote import BatchItem, BatchRequest, CompanyFundamentals, QuoteRecord
from marketdesk.schemas.report import (
    AnalysisReport,
    FilingAnalysisRequest,
    PortfolioRecommendation,
    PortfolioRequest,
    ReportRequest,
    SecFilingAnalysis,
    StockContext,
)
from marketdesk.schemas.research import CompanyNewsReport, SecFilings
from marketdesk.services.container import MarketServices, get_services
from marketdesk.services.quotes import normalize_symbol

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BATCH_SYMBOLS = 50


def _normalize_symbols(symbols: list[str]) -> list[str]:
    normalized = [normalize_symbol(symbol) for symbol in symbols]
    if not normalized or any(not symbol for symbol in normalized):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "symbols must be a non-empty list of tickers."},
        )
    if len(normalized) > MAX_BATCH_SYMBOLS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": f"At most {MAX_BATCH_SYMBOLS} symbols per batch."},
        )
    return normalized


def _raise_report_failure(exc: ReportGenerationError) -> None:
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": "Report generation failed.", "reason": str(exc)},
    ) from exc


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/quotes/{symbol}", response_model=QuoteRecord)
def get_quote(symbol: str, services: MarketServices = Depends(get_services)) -> QuoteRecord:
    normalized = normalize_symbol(symbol)
    if not normalized:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Symbol is required.")
    return services.quotes.get_quote(normalized)


@router.post("/quotes/batch", response_model=list[BatchItem])
async def get_quote_batch(
    payload: BatchRequest, services: MarketServices = Depends(get_services)
) -> list[BatchItem]:
    symbols = _normalize_symbols(payload.symbols)
    return await services.batch.get_batch(symbols)


@router.post("/quotes/batch/jobs", response_model=JobResponse)
def enqueue_quote_batch(payload: BatchRequest) -> JobResponse:
    symbols = _normalize_symbols(payload.symbols)
    job = enqueue_batch_refresh(symbols)
    return JobResponse(job_id=job.id, status="queued")


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: str) -> JobResponse:
    try:
        job = fetch_job(job_id)
    except NoSuchJobError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found.") from exc

    job_status = job.get_status()
    status_value = getattr(job_status, "value", job_status) or "queued"
    result = job.return_value() if status_value == "finished" else None
    return JobResponse(job_id=job.id, status=status_value, result=result)


@router.get("/alerts", response_model=list[AlertView])
def get_alerts(services: MarketServices = Depends(get_services)) -> list[AlertView]:
    alerts = services.alerts.get_alerts()
    return [
        AlertView(**alert.model_dump(), time_ago=format_time_ago(alert.timestamp))
        for alert in alerts
    ]


def _require_finnhub_key(services: MarketServices, feature: str) -> str:
    api_key = services.settings.providers.finnhub_api_key
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{feature} require a Finnhub API key.",
        )
    return api_key


def _raise_provider_failure(message: str, failure: Failure) -> None:
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": message, "kind": failure.kind.value, "reason": failure.reason},
    )


@router.get("/fundamentals/{symbol}", response_model=CompanyFundamentals)
def get_fundamentals(
    symbol: str, services: MarketServices = Depends(get_services)
) -> CompanyFundamentals:
    api_key = _require_finnhub_key(services, "Fundamentals")
    result = finnhub.fetch_fundamentals(
        normalize_symbol(symbol), api_key, services.settings.providers.request_timeout_seconds
    )
    if isinstance(result, Failure):
        _raise_provider_failure("Failed to fetch fundamentals.", result)
    return result.value


@router.get("/news/{symbol}", response_model=CompanyNewsReport)
def get_company_news(
    symbol: str, services: MarketServices = Depends(get_services)
) -> CompanyNewsReport:
    api_key = _require_finnhub_key(services, "Company news")
    provider_settings = services.settings.providers
    normalized = normalize_symbol(symbol)
    news = finnhub.fetch_company_news(
        normalized,
        api_key,
        provider_settings.request_timeout_seconds,
        lookback_days=provider_settings.news_lookback_days,
    )
    if isinstance(news, Failure):
        _raise_provider_failure("Failed to fetch company news.", news)

    # Sentiment is a premium endpoint; news is still useful without it.
    sentiment = finnhub.fetch_news_sentiment(
        normalized, api_key, provider_settings.request_timeout_seconds
    )
    if isinstance(sentiment, Failure):
        logger.warning(
            "News sentiment unavailable for %s (%s): %s",
            normalized,
            sentiment.kind.value,
            sentiment.reason,
        )
        return CompanyNewsReport(
            symbol=normalized, news=news.value, sentiment_error=sentiment.reason
        )
    return CompanyNewsReport(symbol=normalized, news=news.value, sentiment=sentiment.value)


@router.get("/filings/{cik}", response_model=SecFilings)
def get_sec_filings(cik: str, services: MarketServices = Depends(get_services)) -> SecFilings:
    try:
        normalized = edgar.normalize_cik(cik)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    provider_settings = services.settings.providers
    result = edgar.fetch_filings(
        normalized, provider_settings.sec_user_agent, provider_settings.request_timeout_seconds
    )
    if isinstance(result, Failure):
        _raise_provider_failure("Failed to fetch SEC filings.", result)
    return result.value


@router.post("/reports", response_model=AnalysisReport)
def create_report(
    payload: ReportRequest, services: MarketServices = Depends(get_services)
) -> AnalysisReport:
    quote = services.quotes.get_quote(payload.symbol)
    stock = StockContext(
        symbol=quote.symbol,
        name=payload.name.strip() or quote.symbol,
        sector=payload.sector,
        market_cap=payload.market_cap,
        price=quote.price,
        change=quote.change,
        change_percent=quote.change_percent,
    )
    try:
        return services.reports.generate(stock)
    except ReportGenerationError as exc:
        _raise_report_failure(exc)


@router.post("/reports/filings", response_model=SecFilingAnalysis)
def analyze_filing(
    payload: FilingAnalysisRequest, services: MarketServices = Depends(get_services)
) -> SecFilingAnalysis:
    try:
        return services.reports.analyze_filing(payload.filing_text, normalize_symbol(payload.symbol))
    except ReportGenerationError as exc:
        _raise_report_failure(exc)


@router.post("/reports/portfolio", response_model=PortfolioRecommendation)
def recommend_portfolio(
    payload: PortfolioRequest, services: MarketServices = Depends(get_services)
) -> PortfolioRecommendation:
    try:
        return services.reports.recommend_portfolio(payload.risk_profile, payload.investment_amount)
    except ReportGenerationError as exc:
        _raise_report_failure(exc)

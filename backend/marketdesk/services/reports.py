from __future__ import annotations

import datetime
import logging
import random
from typing import Callable, Protocol

from marketdesk.errors import ReportGenerationError
from marketdesk.parsing.analysis import build_report, parse_portfolio_recommendation, parse_sec_analysis
from marketdesk.schemas.report import (
    AnalysisReport,
    PortfolioRecommendation,
    SecFilingAnalysis,
    StockContext,
)

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def stock_analysis(self, stock: StockContext) -> str | None: ...

    def sec_filing_analysis(self, filing_text: str, symbol: str) -> str | None: ...

    def portfolio_recommendation(self, risk_profile: str, investment_amount: float) -> str | None: ...


def _require_text(text: str | None, what: str) -> str:
    if text is None or not text.strip():
        raise ReportGenerationError(f"No analysis text was generated for {what}.")
    return text


class ReportService:
    def __init__(
        self,
        generator: TextGenerator,
        rng: random.Random | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._generator = generator
        self._rng = rng or random.Random()
        self._clock = clock

    def generate(self, stock: StockContext) -> AnalysisReport:
        text = _require_text(self._generator.stock_analysis(stock), stock.symbol)
        now = self._clock() if self._clock else None
        report = build_report(text, stock, self._rng, now)
        logger.info(
            "Generated analysis report for %s (%s)",
            stock.symbol,
            report.sections.recommendation.rating,
        )
        return report

    def analyze_filing(self, filing_text: str, symbol: str) -> SecFilingAnalysis:
        text = _require_text(self._generator.sec_filing_analysis(filing_text, symbol), f"{symbol} filing")
        return parse_sec_analysis(text)

    def recommend_portfolio(self, risk_profile: str, investment_amount: float) -> PortfolioRecommendation:
        text = _require_text(
            self._generator.portfolio_recommendation(risk_profile, investment_amount),
            "portfolio recommendation",
        )
        return parse_portfolio_recommendation(text)

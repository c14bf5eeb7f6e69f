from __future__ import annotations

import datetime
import logging
import random
import re
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from marketdesk.parsing import defaults
from marketdesk.schemas.report import (
    AnalysisReport,
    FundamentalAnalysis,
    MarketPosition,
    MovingAverages,
    PortfolioRecommendation,
    Recommendation,
    ReportSections,
    SecFilingAnalysis,
    StockContext,
    TechnicalAnalysis,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FLAGS = re.IGNORECASE
NUMBER = r"(\d+(?:,\d{3})*(?:\.\d+)?)"
LEVEL_LINK = r"(?:\s+levels?)?(?:\s+(?:is|of|at|near|around))?\s*[:=]?\s*\$?\s*"

# A section ends at a blank line, a markdown heading, or the next numbered
# upper-case heading such as "3. FUNDAMENTAL ANALYSIS".
SECTION_END = (
    r"(?=\n[ \t]*\n"
    r"|\n[ \t]*#{1,6}[ \t]"
    r"|\n[ \t]*(?:\*\*)?\d+\.[ \t]+(?:\*\*)?(?-i:[A-Z][A-Z &/-]{3,})"
    r"|\Z)"
)
RISK_SPLIT_RE = re.compile(r"\n+|•|(?:^|(?<=\s))(?:[-*]|\d+[.)])\s+", re.MULTILINE)
RISK_LEAD_RE = re.compile(r"^[\s\-•*:.)]+")
MIN_RISK_LENGTH = 15
MAX_RISKS = 5


def parse_number(raw_value: str) -> float:
    return float(raw_value.replace(",", ""))


def _rating(match: re.Match[str]) -> str:
    return re.sub(r"\s+", " ", match.group(1).upper())


def _title(match: re.Match[str]) -> str:
    return match.group(1).capitalize()


def _price(match: re.Match[str]) -> float:
    return parse_number(match.group(1))


def _percent(match: re.Match[str]) -> str:
    return f"{match.group(1)}%"


def _text(match: re.Match[str]) -> str:
    value = match.group(1).strip(" :-*")
    if not value:
        raise ValueError("empty match")
    return value


@dataclass(frozen=True)
class ExtractionRule(Generic[T]):
    field: str
    pattern: re.Pattern[str]
    extract: Callable[[re.Match[str]], T]
    default: Callable[[StockContext, random.Random], T]

    def find(self, text: str) -> T | None:
        match = self.pattern.search(text)
        if not match:
            return None
        try:
            return self.extract(match)
        except ValueError:
            return None

    def apply(self, text: str, stock: StockContext, rng: random.Random) -> T:
        value = self.find(text)
        if value is None:
            logger.debug("No %s found in analysis text, using default", self.field)
            return self.default(stock, rng)
        return value


def metric_pattern(label: str) -> re.Pattern[str]:
    """Match ``<label> [ratio] [is/of/at] [:] <number>[%]``; ``label`` is a regex fragment."""
    return re.compile(
        rf"\b{label}(?:\s+ratio)?(?:\s+(?:is|of|at|around))?\s*[:=]?\s*{NUMBER}\s*%?",
        FLAGS,
    )


RATING = ExtractionRule(
    "rating", re.compile(r"\b(STRONG\s+BUY|STRONG\s+SELL|BUY|SELL|HOLD)\b", FLAGS), _rating, defaults.rating
)
TARGET_PRICE = ExtractionRule(
    "target_price",
    re.compile(rf"target\s+price(?:\s+(?:is|of|at))?\s*[:=]?\s*\$?\s*{NUMBER}", FLAGS),
    _price,
    defaults.target_price,
)
TREND = ExtractionRule(
    "trend",
    re.compile(r"\b(bullish|bearish|neutral|positive|negative)\b", FLAGS),
    _title,
    defaults.trend,
)
SUPPORT = ExtractionRule(
    "support", re.compile(rf"\bsupport{LEVEL_LINK}{NUMBER}", FLAGS), _price, defaults.support
)
RESISTANCE = ExtractionRule(
    "resistance", re.compile(rf"\bresistance{LEVEL_LINK}{NUMBER}", FLAGS), _price, defaults.resistance
)
TIMEFRAME = ExtractionRule(
    "timeframe",
    re.compile(r"(\d+(?:\s*-\s*\d+)?[\s-]*(?:months?|years?|weeks?))\b", FLAGS),
    lambda match: match.group(1),
    defaults.timeframe,
)
MACD = ExtractionRule("macd", re.compile(r"\bMACD\b[:\s]*([^.\n]*)", FLAGS), _text, defaults.macd)
PE_RATIO = ExtractionRule("pe_ratio", metric_pattern("P/E"), _price, defaults.pe_ratio)
BETA = ExtractionRule("beta", metric_pattern("beta"), _price, defaults.beta)
DIVIDEND = ExtractionRule(
    "dividend_yield", metric_pattern(r"dividend(?:\s+yield)?"), _percent, defaults.dividend_yield
)
RSI = ExtractionRule("rsi", metric_pattern("RSI"), _price, defaults.rsi)
REVENUE_GROWTH = ExtractionRule(
    "revenue_growth", metric_pattern("revenue growth"), _percent, defaults.revenue_growth
)
EARNINGS_GROWTH = ExtractionRule(
    "earnings_growth", metric_pattern("earnings growth"), _percent, defaults.earnings_growth
)
PROFIT_MARGIN = ExtractionRule(
    "profit_margin", metric_pattern("profit margin"), _percent, defaults.profit_margin
)
ROE = ExtractionRule("roe", metric_pattern("ROE"), _percent, defaults.roe)
CONFIDENCE_RE = re.compile(r"confidence(?:\s+level)?(?:\s+(?:is|of))?\s*[:=]?\s*(\d{1,3})\s*%", FLAGS)


def section_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"{re.escape(name)}[ \t*#]*(?:\([^)\n]*\))?[ \t*#]*(?::|\n)\s*(.*?){SECTION_END}",
        FLAGS | re.DOTALL,
    )


def extract_section(text: str, name: str) -> str | None:
    match = section_pattern(name).search(text)
    if not match:
        return None
    body = match.group(1).strip().strip("*").strip()
    return body or None


def extract_risk_factors(text: str) -> list[str] | None:
    section = extract_section(text, "RISK FACTORS") or extract_section(text, "RISKS")
    if not section:
        return None

    risks: list[str] = []
    for fragment in RISK_SPLIT_RE.split(section):
        cleaned = RISK_LEAD_RE.sub("", fragment).strip().strip("*").strip()
        if len(cleaned) > MIN_RISK_LENGTH:
            risks.append(cleaned)
    return risks[:MAX_RISKS] or None


def extract_recommendation(text: str, stock: StockContext, rng: random.Random) -> Recommendation:
    rating = RATING.apply(text, stock, rng)
    confidence_match = CONFIDENCE_RE.search(text)
    if confidence_match:
        confidence = f"{confidence_match.group(1)}%"
    else:
        confidence = defaults.confidence(rating, rng)
    return Recommendation(
        rating=rating,
        target_price=TARGET_PRICE.apply(text, stock, rng),
        timeframe=TIMEFRAME.apply(text, stock, rng),
        confidence=confidence,
    )


def extract_technicals(text: str, stock: StockContext, rng: random.Random) -> TechnicalAnalysis:
    return TechnicalAnalysis(
        trend=TREND.apply(text, stock, rng),
        support=SUPPORT.apply(text, stock, rng),
        resistance=RESISTANCE.apply(text, stock, rng),
        rsi=RSI.apply(text, stock, rng),
        macd=MACD.apply(text, stock, rng),
        moving_averages=MovingAverages(
            ma50=defaults.moving_average(stock, 50, rng),
            ma200=defaults.moving_average(stock, 200, rng),
        ),
    )


def extract_market_position(text: str, stock: StockContext, rng: random.Random) -> MarketPosition:
    return MarketPosition(
        current_price=stock.price,
        market_cap=stock.market_cap,
        pe_ratio=PE_RATIO.apply(text, stock, rng),
        volume=defaults.volume_label(stock, rng),
        avg_volume=defaults.volume_label(stock, rng),
        beta=BETA.apply(text, stock, rng),
        dividend_yield=DIVIDEND.apply(text, stock, rng),
    )


def extract_fundamentals(text: str, stock: StockContext, rng: random.Random) -> FundamentalAnalysis:
    return FundamentalAnalysis(
        revenue_growth=REVENUE_GROWTH.apply(text, stock, rng),
        earnings_growth=EARNINGS_GROWTH.apply(text, stock, rng),
        profit_margin=PROFIT_MARGIN.apply(text, stock, rng),
        roe=ROE.apply(text, stock, rng),
        debt_to_equity=defaults.debt_to_equity(stock, rng),
        current_ratio=defaults.current_ratio(stock, rng),
    )


def build_report(
    text: str,
    stock: StockContext,
    rng: random.Random,
    now: datetime.datetime | None = None,
) -> AnalysisReport:
    recommendation = extract_recommendation(text, stock, rng)
    executive_summary = extract_section(text, "EXECUTIVE SUMMARY") or defaults.executive_summary(
        stock, recommendation.rating
    )
    risks = extract_risk_factors(text) or defaults.sector_risks(stock, rng)

    return AnalysisReport(
        stock=stock,
        generated_at=now or datetime.datetime.now(datetime.UTC),
        summary=f"AI-Generated Professional Analysis for {stock.symbol} ({stock.name})",
        is_ai_generated=True,
        sections=ReportSections(
            executive_summary=executive_summary,
            market_position=extract_market_position(text, stock, rng),
            technical_analysis=extract_technicals(text, stock, rng),
            fundamental_analysis=extract_fundamentals(text, stock, rng),
            recommendation=recommendation,
            risks=risks,
        ),
    )


def parse_sec_analysis(text: str) -> SecFilingAnalysis:
    return SecFilingAnalysis(
        key_highlights=extract_section(text, "Key Financial Highlights"),
        revenue_changes=extract_section(text, "Revenue/Earnings Changes"),
        risk_factors=extract_section(text, "Risk Factors"),
        management_outlook=extract_section(text, "Management Outlook"),
        material_events=extract_section(text, "Material Events"),
    )


def parse_portfolio_recommendation(text: str) -> PortfolioRecommendation:
    return PortfolioRecommendation(
        allocation=extract_section(text, "Asset Allocation"),
        recommendations=extract_section(text, "Recommendations"),
        expected_returns=extract_section(text, "Expected Returns"),
        risk_assessment=extract_section(text, "Risk Assessment"),
        rebalancing=extract_section(text, "Rebalancing Strategy"),
    )

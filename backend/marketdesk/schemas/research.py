from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from marketdesk.schemas.alert import AlertType


class CompanyNewsItem(BaseModel):
    headline: str
    summary: Optional[str] = None
    url: Optional[str] = None
    source: Optional[str] = None
    published_at: datetime.datetime
    type: AlertType


class NewsSentiment(BaseModel):
    symbol: str
    buzz: Optional[float] = None
    articles_in_last_week: Optional[int] = None
    bullish_percent: Optional[float] = None
    bearish_percent: Optional[float] = None
    company_news_score: Optional[float] = None
    sector_average_news_score: Optional[float] = None


class CompanyNewsReport(BaseModel):
    symbol: str
    news: list[CompanyNewsItem] = Field(default_factory=list)
    sentiment: Optional[NewsSentiment] = None
    sentiment_error: Optional[str] = None


class SecCompany(BaseModel):
    cik: str
    name: Optional[str] = None
    sic: Optional[str] = None
    sic_description: Optional[str] = None
    exchanges: list[str] = Field(default_factory=list)


class SecFiling(BaseModel):
    accession_number: str
    form: str
    filing_date: Optional[str] = None
    report_date: Optional[str] = None
    primary_document: Optional[str] = None


class SecFilings(BaseModel):
    company: SecCompany
    filings: list[SecFiling] = Field(default_factory=list)

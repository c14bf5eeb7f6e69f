from __future__ import annotations

import datetime
import logging

import openai
from openai import OpenAI

from marketdesk.config.settings import Settings
from marketdesk.errors import ReportGenerationError
from marketdesk.schemas.report import StockContext

logger = logging.getLogger(__name__)

ANALYST_SYSTEM_PROMPT = (
    "You are a CFA charterholder and senior equity research analyst. Provide institutional-quality "
    "analysis with specific, actionable insights and precise numerical targets."
)
FILING_SYSTEM_PROMPT = "You are an expert at analyzing SEC filings and extracting investment-relevant information."
PLANNER_SYSTEM_PROMPT = (
    "You are a certified financial planner specializing in portfolio construction and risk management."
)


def _stock_prompt(stock: StockContext) -> str:
    return (
        f"Company: {stock.name} ({stock.symbol})\n"
        f"Current Price: ${stock.price}\n"
        f"Price Change: {stock.change} ({stock.change_percent}%)\n"
        f"Market Cap: {stock.market_cap or 'n/a'}\n"
        f"Sector: {stock.sector or 'n/a'}\n"
        f"Analysis Date: {datetime.date.today().isoformat()}\n\n"
        "Sections: 1. EXECUTIVE SUMMARY 2. TECHNICAL ANALYSIS 3. FUNDAMENTAL ANALYSIS "
        "4. INVESTMENT RECOMMENDATION (BUY/HOLD/SELL, target price, confidence, timeframe) "
        "5. RISK FACTORS (4-5 bullet points)."
    )


class AnalysisTextClient:
    """Thin wrapper over OpenAI chat completions returning raw analysis text."""

    def __init__(self, settings: Settings, client: OpenAI | None = None) -> None:
        self._model = settings.providers.openai_model
        self._api_key = settings.providers.openai_api_key
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key:
                raise ReportGenerationError(
                    "OpenAI API key is required. Set MARKETDESK_OPENAI_API_KEY to enable reports."
                )
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.2,
    ) -> str | None:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=float(temperature),
            )
        except openai.AuthenticationError as exc:
            logger.error("OpenAI authentication failed: %s", exc)
            raise ReportGenerationError("Invalid OpenAI API key.") from exc
        except openai.RateLimitError as exc:
            logger.error("OpenAI rate limit: %s", exc)
            if "quota" in str(exc).lower():
                raise ReportGenerationError("OpenAI API quota exceeded.") from exc
            raise ReportGenerationError("Rate limit exceeded. Please wait a moment and try again.") from exc
        except openai.OpenAIError as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise ReportGenerationError(f"AI analysis failed: {exc}") from exc

        if not response.choices:
            return None
        return response.choices[0].message.content

    def stock_analysis(self, stock: StockContext) -> str | None:
        return self.complete(ANALYST_SYSTEM_PROMPT, _stock_prompt(stock))

    def sec_filing_analysis(self, filing_text: str, symbol: str) -> str | None:
        prompt = (
            f"Analyze this SEC filing excerpt for {symbol} and extract: Key Financial Highlights, "
            "Revenue/Earnings Changes, Risk Factors, Management Outlook, Material Events.\n\n"
            f"Filing excerpt: {filing_text[:3000]}"
        )
        return self.complete(FILING_SYSTEM_PROMPT, prompt, max_tokens=1000)

    def portfolio_recommendation(self, risk_profile: str, investment_amount: float) -> str | None:
        prompt = (
            f"Risk Profile: {risk_profile}\nInvestment Amount: ${investment_amount}\n\n"
            "Provide: Asset Allocation, Recommendations, Expected Returns, Risk Assessment, "
            "Rebalancing Strategy."
        )
        return self.complete(PLANNER_SYSTEM_PROMPT, prompt, max_tokens=1500, temperature=0.4)

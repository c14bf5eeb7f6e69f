"""Synthetic quotes and alerts sharing the live record schemas.

Both generators are pure: randomness comes from the ``rng`` argument and the
wall clock from ``now``, so seeded tests can assert exact bounds.
"""

from __future__ import annotations

import datetime
import math
import random
from dataclasses import dataclass

from marketdesk.schemas.alert import AlertRecord, AlertType
from marketdesk.schemas.quote import QuoteRecord

SIMULATED_QUOTE_SOURCE = "Simulated (Rate Limited)"
SIMULATED_ALERT_SOURCE = "Market Simulation"

BASE_PRICES: dict[str, float] = {
    "AAPL": 180,
    "MSFT": 415,
    "NVDA": 450,
    "GOOGL": 140,
    "META": 500,
    "AMZN": 140,
    "TSLA": 240,
    "BRK.B": 430,
    "JPM": 185,
    "V": 245,
}
DEFAULT_BASE_PRICE = 100.0

BASE_VOLUMES: dict[str, int] = {
    "AAPL": 50_000_000,
    "NVDA": 25_000_000,
    "MSFT": 30_000_000,
}
DEFAULT_BASE_VOLUME = 20_000_000

WATCH_SYMBOLS = ["AAPL", "MSFT", "NVDA", "GOOGL", "META", "TSLA", "AMZN"]
SIMULATED_ALERT_COUNT = 6


@dataclass(frozen=True)
class AlertTemplate:
    template: str
    type: AlertType
    max_minutes_ago: int


ALERT_TEMPLATES = [
    AlertTemplate("{symbol} showing bullish momentum after earnings beat", "bullish", 30),
    AlertTemplate("Fed minutes suggest higher rates for longer", "bearish", 60),
    AlertTemplate("{symbol} filed 10-Q report - Revenue up {percent}% YoY", "neutral", 120),
    AlertTemplate("Tech sector rallies on AI breakthrough announcement", "bullish", 45),
    AlertTemplate("{symbol} announces stock buyback program worth ${amount}B", "bullish", 90),
    AlertTemplate("Market volatility increases amid geopolitical tensions", "bearish", 180),
    AlertTemplate("{symbol} upgrades price target to ${price}", "bullish", 60),
    AlertTemplate("Crypto market surge lifts blockchain-related stocks", "bullish", 30),
]


def round2(value: float) -> float:
    return round(value, 2)


def base_price(symbol: str) -> float:
    return float(BASE_PRICES.get(symbol, DEFAULT_BASE_PRICE))


def base_volume(symbol: str) -> int:
    return BASE_VOLUMES.get(symbol, DEFAULT_BASE_VOLUME)


def simulate_quote(
    symbol: str, rng: random.Random, now: datetime.datetime | None = None
) -> QuoteRecord:
    variation = rng.uniform(-0.03, 0.03)
    price = round2(base_price(symbol) * (1 + variation))

    daily_change = rng.uniform(-0.02, 0.02)
    change = round2(price * daily_change)
    volume = math.floor(base_volume(symbol) * rng.uniform(0.5, 1.5))

    return QuoteRecord(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=round2(daily_change * 100),
        volume=volume,
        high=round2(price * 1.02),
        low=round2(price * 0.98),
        open=round2(price * (1 - daily_change / 2)),
        previous_close=round2(price - change),
        timestamp=now or datetime.datetime.now(datetime.UTC),
        is_live=False,
        source=SIMULATED_QUOTE_SOURCE,
    )


def _fill_template(template: str, rng: random.Random) -> str:
    values = {
        "symbol": rng.choice(WATCH_SYMBOLS),
        "percent": str(rng.randint(5, 24)),
        "amount": f"{rng.uniform(10, 60):.1f}",
        "price": f"{rng.uniform(150, 350):.0f}",
    }
    title = template
    for placeholder, value in values.items():
        title = title.replace("{" + placeholder + "}", value)
    return title


def simulate_alerts(
    rng: random.Random, now: datetime.datetime | None = None
) -> list[AlertRecord]:
    current = now or datetime.datetime.now(datetime.UTC)
    stamp = int(current.timestamp() * 1000)

    alerts: list[AlertRecord] = []
    for index, template in enumerate(ALERT_TEMPLATES[:SIMULATED_ALERT_COUNT]):
        minutes_ago = rng.randrange(template.max_minutes_ago)
        alerts.append(
            AlertRecord(
                id=f"alert_{index}_{stamp}",
                title=_fill_template(template.template, rng),
                type=template.type,
                timestamp=current - datetime.timedelta(minutes=minutes_ago),
                source=SIMULATED_ALERT_SOURCE,
                is_live=False,
                minutes_ago=minutes_ago,
            )
        )
    return alerts

from __future__ import annotations

import datetime

from marketdesk.schemas.alert import AlertType

BULLISH_KEYWORDS = ["beat", "surge", "rally", "jump", "gain", "bullish", "up", "rise"]
BEARISH_KEYWORDS = ["fall", "drop", "decline", "bear", "down", "plunge", "crash"]

SENTIMENT_THRESHOLD = 0.2
TITLE_MAX_LENGTH = 80


def classify_score(score: float) -> AlertType:
    if score > SENTIMENT_THRESHOLD:
        return "bullish"
    if score < -SENTIMENT_THRESHOLD:
        return "bearish"
    return "neutral"


def classify_headline(headline: str) -> AlertType:
    # Substring match; bullish keywords win over bearish ones.
    lower = headline.lower()
    if any(word in lower for word in BULLISH_KEYWORDS):
        return "bullish"
    if any(word in lower for word in BEARISH_KEYWORDS):
        return "bearish"
    return "neutral"


def create_alert_title(headline: str, ticker_sentiment: list[dict] | None = None) -> str:
    title = headline[:TITLE_MAX_LENGTH]
    if not ticker_sentiment:
        return title

    main = ticker_sentiment[0]
    try:
        score = float(main.get("ticker_sentiment_score"))
    except (TypeError, ValueError):
        return title
    ticker = main.get("ticker") or ""
    if score > SENTIMENT_THRESHOLD:
        return f"{ticker} showing bullish momentum - {title}"
    if score < -SENTIMENT_THRESHOLD:
        return f"{ticker} facing bearish pressure - {title}"
    return title


def format_time_ago(timestamp: datetime.datetime, now: datetime.datetime | None = None) -> str:
    current = now or datetime.datetime.now(datetime.UTC)
    diff_seconds = (current - timestamp).total_seconds()
    diff_mins = int(diff_seconds // 60)
    diff_hours = diff_mins // 60
    diff_days = diff_hours // 24

    if diff_mins < 1:
        return "Just now"
    if diff_mins < 60:
        return f"{diff_mins} mins ago"
    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours > 1 else ''} ago"
    return f"{diff_days} day{'s' if diff_days > 1 else ''} ago"

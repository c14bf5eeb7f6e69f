from __future__ import annotations

import datetime
from typing import Literal, Optional

from pydantic import BaseModel

AlertType = Literal["bullish", "bearish", "neutral"]


class AlertRecord(BaseModel):
    id: str
    title: str
    type: AlertType
    timestamp: datetime.datetime
    source: str
    is_live: bool
    minutes_ago: Optional[int] = None


class AlertView(AlertRecord):
    time_ago: str

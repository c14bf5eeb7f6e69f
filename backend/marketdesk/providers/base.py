from __future__ import annotations

import enum
import json
import socket
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from marketdesk.schemas.alert import AlertRecord
from marketdesk.schemas.quote import QuoteRecord

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_RESPONSE = "empty_response"
    PROVIDER_ERROR = "provider_error"
    NO_PROVIDER_CONFIGURED = "no_provider_configured"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    reason: str


ProviderResult = Union[Success[T], Failure]


@dataclass(frozen=True)
class QuoteProvider:
    """A quote source bound to its credential; unconfigured without a key."""

    name: str
    api_key: str | None
    fetch: Callable[[str, str, float], ProviderResult[QuoteRecord]]
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def fetch_quote(self, symbol: str) -> ProviderResult[QuoteRecord]:
        return self.fetch(symbol, self.api_key or "", self.timeout)


@dataclass(frozen=True)
class NewsProvider:
    name: str
    api_key: str | None
    fetch: Callable[[str, int, float], ProviderResult[list[AlertRecord]]]
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def fetch_alerts(self, limit: int) -> ProviderResult[list[AlertRecord]]:
        return self.fetch(self.api_key or "", limit, self.timeout)


def build_url(base_url: str, path: str, params: dict[str, str]) -> str:
    return f"{base_url}{path}?{urlencode(params)}"


def request_json(
    url: str,
    timeout: float = 10.0,
    provider: str = "provider",
    headers: dict[str, str] | None = None,
) -> ProviderResult[Any]:
    request = Request(url, headers=headers or {})
    try:
        with urlopen(request, timeout=timeout) as response:
            body = response.read().decode("utf-8")
    except HTTPError as exc:
        if exc.code == 429:
            return Failure(FailureKind.RATE_LIMITED, f"{provider}: rate limit exceeded (HTTP 429)")
        return Failure(FailureKind.NETWORK_ERROR, f"{provider}: HTTP {exc.code}")
    except (URLError, TimeoutError, socket.timeout) as exc:
        return Failure(FailureKind.NETWORK_ERROR, f"{provider}: {exc}")

    try:
        return Success(json.loads(body))
    except json.JSONDecodeError:
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{provider}: response is not valid JSON")


def parse_float(raw_value: Any) -> float:
    if isinstance(raw_value, str):
        raw_value = raw_value.strip().replace("%", "")
    return float(raw_value)

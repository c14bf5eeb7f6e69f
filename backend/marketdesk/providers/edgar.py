"""SEC EDGAR company submissions.

EDGAR needs no API key but refuses requests without a descriptive
``User-Agent``. Recent filings arrive column-wise (one list per field), so
they are zipped back into rows here.
"""

from __future__ import annotations

from marketdesk.providers.base import (
    Failure,
    FailureKind,
    ProviderResult,
    Success,
    request_json,
)
from marketdesk.schemas.research import SecCompany, SecFiling, SecFilings

NAME = "SEC EDGAR"
_BASE_URL = "https://data.sec.gov"
FILINGS_LIMIT = 20


def normalize_cik(raw_cik: str) -> str:
    cik = raw_cik.strip().upper().removeprefix("CIK")
    if not cik.isdigit() or len(cik) > 10:
        raise ValueError(f"CIK must be up to 10 digits, got {raw_cik!r}")
    return cik.zfill(10)


def submissions_url(cik: str) -> str:
    return f"{_BASE_URL}/submissions/CIK{cik}.json"


def _column(recent: dict, name: str, index: int) -> str | None:
    values = recent.get(name)
    if not isinstance(values, list) or index >= len(values):
        return None
    value = values[index]
    return str(value) if value else None


def parse_filings(cik: str, payload: object, limit: int = FILINGS_LIMIT) -> ProviderResult[SecFilings]:
    if not isinstance(payload, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: unexpected payload type")
    filings_block = payload.get("filings")
    if not isinstance(filings_block, dict):
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{NAME}: submissions payload has no filings")

    recent = filings_block.get("recent") or {}
    accession_numbers = recent.get("accessionNumber") or []
    filings: list[SecFiling] = []
    for index, accession_number in enumerate(accession_numbers[:limit]):
        form = _column(recent, "form", index)
        if not accession_number or not form:
            continue
        filings.append(
            SecFiling(
                accession_number=str(accession_number),
                form=form,
                filing_date=_column(recent, "filingDate", index),
                report_date=_column(recent, "reportDate", index),
                primary_document=_column(recent, "primaryDocument", index),
            )
        )

    exchanges = payload.get("exchanges")
    if not isinstance(exchanges, list):
        exchanges = []
    company = SecCompany(
        cik=cik,
        name=payload.get("name") or None,
        sic=str(payload["sic"]) if payload.get("sic") else None,
        sic_description=payload.get("sicDescription") or None,
        exchanges=[str(exchange) for exchange in exchanges if exchange],
    )
    return Success(SecFilings(company=company, filings=filings))


def fetch_filings(
    cik: str, user_agent: str, timeout: float = 10.0, limit: int = FILINGS_LIMIT
) -> ProviderResult[SecFilings]:
    result = request_json(
        submissions_url(cik),
        timeout=timeout,
        provider=NAME,
        headers={"User-Agent": user_agent, "Accept": "application/json"},
    )
    if isinstance(result, Failure):
        return result
    return parse_filings(cik, result.value, limit)

from __future__ import annotations

import logging
import re
from typing import Any

from docketwatch.extract import CASE_HISTORY_HEADING, parse_case_identity, parse_docket_table
from docketwatch.transport import FetchResponse, Transport, TransportError, is_soft_block
from docketwatch.types import CaseIdentity, DocketTable

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pch.tncourts.gov"
_CASE_ID_PARAM = re.compile(r"id=(\d+)")


def extract_internal_id(reference: str) -> str | None:
    """
    Resolve the site's internal case id from user input.

    Users paste the full case URL (`.../CaseDetails.aspx?id=30247`); a bare number is accepted too.
    """

    cleaned = reference.strip()
    if cleaned.isdigit():
        return cleaned
    match = _CASE_ID_PARAM.search(cleaned)
    return match.group(1) if match else None


class CourtSite:
    """Case pages of the appellate court's public case history site."""

    def __init__(self, transport: Transport, base_url: str = DEFAULT_BASE_URL) -> None:
        self.transport = transport
        self.base_url = base_url.rstrip("/")

    def case_url(self, internal_id: str) -> str:
        return f"{self.base_url}/CaseDetails.aspx?id={internal_id}&Number=True"

    def fetch_case_page(self, internal_id: str, *, timeout: float | None = None) -> FetchResponse:
        url = self.case_url(internal_id)
        response = self.transport.fetch(url, timeout=timeout)
        if response.status >= 400:
            raise TransportError(f"GET {url} returned HTTP {response.status}")
        return response

    def lookup_case(self, reference: str) -> CaseIdentity | None:
        internal_id = extract_internal_id(reference)
        if internal_id is None:
            return None

        html = self.fetch_case_page(internal_id).text
        if is_soft_block(html):
            logger.warning("Case lookup hit the site's security notice", extra={"internal_id": internal_id})
            return None
        return parse_case_identity(html, internal_id=internal_id, url=self.case_url(internal_id))

    def scrape_docket(self, internal_id: str) -> DocketTable:
        html = self.fetch_case_page(internal_id).text
        if is_soft_block(html):
            logger.warning("Docket scrape hit the site's security notice", extra={"internal_id": internal_id})
            return DocketTable(blocked=True)

        table = parse_docket_table(html)
        logger.debug(
            "Parsed docket table",
            extra={"internal_id": internal_id, "entries": len(table.entries)},
        )
        return table

    def probe(self, internal_id: str) -> dict[str, Any]:
        """Summarise what the site returns for a case page; used to diagnose blocking."""

        response = self.fetch_case_page(internal_id)
        html = response.text
        return {
            "url": self.case_url(internal_id),
            "status": response.status,
            "body_length": len(html),
            "first500": html[:500],
            "contains_security_notice": "Security Notice" in html,
            "contains_unusual_activity": "Unusual Activity" in html,
            "contains_case_history": CASE_HISTORY_HEADING in html,
        }

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol

import httpx

SOFT_BLOCK_MARKERS = ("Security Notice", "Unusual Activity")


class TransportError(RuntimeError):
    """Raised when a request could not be completed (connect, TLS, timeout, bad status)."""


@dataclass(slots=True)
class FetchResponse:
    status: int
    headers: httpx.Headers
    body: str | bytes

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def set_cookies(self) -> list[str]:
        return self.headers.get_list("set-cookie")


class Transport(Protocol):
    """Interface for issuing requests that look like a desktop browser to the court site."""

    def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | bytes | None = None,
        want_binary: bool = False,
        timeout: float | None = None,
    ) -> FetchResponse:
        """Return the final response after following redirects."""


def is_soft_block(body: str | bytes) -> bool:
    """
    Detect the anti-bot interstitial.

    The site answers blocked clients with HTTP 200 and a "Security Notice" page, so the status code
    alone never tells us whether we received real data.
    """

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return any(marker in body for marker in SOFT_BLOCK_MARKERS)

from __future__ import annotations

import logging
import ssl
from typing import Any, Mapping

import httpx

from docketwatch.transport.base import FetchResponse, Transport, TransportError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

# TLS 1.2 suites in the order Chrome offers them. TLS 1.3 suites are negotiated by OpenSSL's
# defaults, which already match the browser list.
CHROME_CIPHERS = ":".join(
    [
        "ECDHE-ECDSA-AES128-GCM-SHA256",
        "ECDHE-RSA-AES128-GCM-SHA256",
        "ECDHE-ECDSA-AES256-GCM-SHA384",
        "ECDHE-RSA-AES256-GCM-SHA384",
        "ECDHE-ECDSA-CHACHA20-POLY1305",
        "ECDHE-RSA-CHACHA20-POLY1305",
        "ECDHE-RSA-AES128-SHA",
        "ECDHE-RSA-AES256-SHA",
        "AES128-GCM-SHA256",
        "AES256-GCM-SHA384",
    ]
)

# Followed by hand so the caller's headers, Cookie included, are re-sent on every hop.
_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def browser_headers(user_agent: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


def browser_ssl_context() -> ssl.SSLContext:
    """TLS context whose handshake resembles a desktop Chrome client."""

    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.set_ciphers(CHROME_CIPHERS)
    return context


class BrowserTransport(Transport):
    """
    Transport that presents a browser-equivalent fingerprint to the court site.

    The site serves a "Security Notice" page to clients whose TLS handshake or header set looks like
    a library default, so the cipher list, protocol floor and headers are pinned here. Redirects are
    followed with the caller's headers re-sent on each hop. Cookies are never stored between calls:
    callers that need a session cookie read `Set-Cookie` from the response and send it back
    themselves.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int = 10,
    ) -> None:
        self._client = httpx.Client(
            headers=browser_headers(user_agent),
            timeout=timeout,
            verify=browser_ssl_context(),
        )
        self.max_redirects = max_redirects

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BrowserTransport":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | bytes | None,
        timeout: float | None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": headers, "follow_redirects": False}
        if body is not None:
            kwargs["content"] = body
        if timeout is not None:
            kwargs["timeout"] = timeout
        # The jar picks up Set-Cookie from every hop; only the caller's Cookie header may go out.
        self._client.cookies.clear()
        return self._client.request(method, url, **kwargs)

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
        request_headers = dict(headers or {})
        current_url, current_method, current_body = url, method, body
        redirects = 0

        try:
            while True:
                response = self._send(current_method, current_url, request_headers, current_body, timeout)
                location = response.headers.get("Location")
                if response.status_code not in _REDIRECT_STATUSES or not location:
                    break
                if redirects >= self.max_redirects:
                    raise TransportError(f"{method} {url} exceeded {self.max_redirects} redirects")
                redirects += 1
                current_url = str(response.url.join(location))
                if response.status_code in (301, 302, 303) and current_method != "HEAD":
                    current_method, current_body = "GET", None
                    request_headers = {
                        name: value for name, value in request_headers.items() if name.lower() != "content-type"
                    }
        except httpx.HTTPError as exc:
            logger.warning(
                "Request to court site failed",
                extra={"url": url, "method": method, "error": str(exc)},
            )
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        finally:
            self._client.cookies.clear()

        logger.debug(
            "Fetched %s %s",
            method,
            response.url,
            extra={"status_code": response.status_code, "redirects": redirects},
        )
        return FetchResponse(
            status=response.status_code,
            headers=response.headers,
            body=response.content if want_binary else response.text,
        )

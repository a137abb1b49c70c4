from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import httpx

from docketwatch.transport.base import FetchResponse, Transport, TransportError


@dataclass(slots=True)
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: str | bytes | None
    timeout: float | None


def canned_response(
    body: str | bytes,
    *,
    status: int = 200,
    headers: Mapping[str, str] | list[tuple[str, str]] | None = None,
) -> FetchResponse:
    return FetchResponse(status=status, headers=httpx.Headers(headers or {}), body=body)


class StaticTransport(Transport):
    """
    Transport backed by canned responses keyed by (method, url).

    A route may hold several responses; they are served in order and the last one repeats. A route
    registered with an exception raises it instead, which is how tests simulate network failures.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list[FetchResponse | Exception]] = {}
        self.requests: list[RecordedRequest] = []

    def add(self, url: str, *responses: FetchResponse | Exception, method: str = "GET") -> "StaticTransport":
        self._routes.setdefault((method.upper(), url), []).extend(responses)
        return self

    def requests_for(self, url: str, method: str = "GET") -> list[RecordedRequest]:
        return [req for req in self.requests if req.url == url and req.method == method.upper()]

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
        method = method.upper()
        self.requests.append(RecordedRequest(method, url, dict(headers or {}), body, timeout))

        queue = self._routes.get((method, url))
        if not queue:
            raise TransportError(f"No canned response for {method} {url}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item

        payload = item.body
        if want_binary and isinstance(payload, str):
            payload = payload.encode("utf-8")
        elif not want_binary and isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")
        return FetchResponse(status=item.status, headers=item.headers, body=payload)

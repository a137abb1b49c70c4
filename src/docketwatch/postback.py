from __future__ import annotations

import logging
from urllib.parse import urlencode

from docketwatch.extract import parse_hidden_fields
from docketwatch.site import CourtSite
from docketwatch.transport import FetchResponse, TransportError

logger = logging.getLogger(__name__)

_ACCEPTED_CONTENT_TYPES = ("pdf", "octet-stream")


def session_cookie_header(response: FetchResponse) -> str:
    """Collapse every `Set-Cookie` header into a single `Cookie` request value."""

    pairs = [raw.split(";", 1)[0].strip() for raw in response.set_cookies()]
    return "; ".join(pair for pair in pairs if pair)


class PostbackClient:
    """
    Retrieves files bound to WebForms link buttons on a case page.

    Each call replays the browser interaction from scratch: GET the page for fresh view-state
    tokens and a session cookie, then POST them back with the link's event target. Nothing is
    shared between calls, so a failed download never poisons the next one.
    """

    def __init__(self, site: CourtSite, *, timeout: float = 20.0) -> None:
        self.site = site
        self.timeout = timeout

    def fetch_attachment(self, internal_id: str, postback_target: str) -> bytes | None:
        url = self.site.case_url(internal_id)
        context = {"internal_id": internal_id, "postback_target": postback_target}
        try:
            page = self.site.fetch_case_page(internal_id, timeout=self.timeout)
            state = parse_hidden_fields(page.text)
            if state is None:
                logger.warning("Case page has no postback tokens", extra=context)
                return None

            form = urlencode(
                {
                    "__VIEWSTATE": state.view_state,
                    "__VIEWSTATEGENERATOR": state.view_state_generator,
                    "__EVENTVALIDATION": state.event_validation,
                    "__EVENTTARGET": postback_target,
                    "__EVENTARGUMENT": "",
                }
            )
            headers = {"Content-Type": "application/x-www-form-urlencoded"}
            cookie = session_cookie_header(page)
            if cookie:
                headers["Cookie"] = cookie

            response = self.site.transport.fetch(
                url,
                method="POST",
                headers=headers,
                body=form,
                want_binary=True,
                timeout=self.timeout,
            )
        except TransportError as exc:
            logger.warning("Attachment download failed", extra={**context, "error": str(exc)})
            return None

        content_type = response.content_type.lower()
        if not any(kind in content_type for kind in _ACCEPTED_CONTENT_TYPES):
            logger.warning(
                "Postback did not return a file",
                extra={**context, "status_code": response.status, "content_type": content_type},
            )
            return None

        body = response.body
        return body if isinstance(body, bytes) else body.encode("utf-8")

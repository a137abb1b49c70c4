from __future__ import annotations

import base64
import logging
from typing import Sequence

import httpx

from docketwatch.notify.base import (
    Attachment,
    NotificationError,
    Notifier,
    alert_subject,
    render_alert_html,
    render_alert_text,
)
from docketwatch.types import ScrapedDocketEntry

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"


class ResendNotifier(Notifier):
    """Sends alerts through the Resend e-mail API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        *,
        base_url: str = RESEND_API_URL,
        timeout: float = 30.0,
    ) -> None:
        if not api_key:
            raise ValueError("A Resend API key is required")
        self._sender = sender
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ResendNotifier":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def send(
        self,
        to: str,
        case_number: str,
        case_name: str,
        entries: Sequence[ScrapedDocketEntry],
        attachments: Sequence[Attachment] = (),
    ) -> None:
        payload = {
            "from": self._sender,
            "to": [to],
            "subject": alert_subject(case_number),
            "html": render_alert_html(case_number, case_name, entries),
            "text": render_alert_text(case_number, case_name, entries),
        }
        if attachments:
            payload["attachments"] = [
                {"filename": item.filename, "content": base64.b64encode(item.content).decode("ascii")}
                for item in attachments
            ]

        try:
            response = self._client.post("/emails", json=payload)
        except httpx.HTTPError as exc:
            raise NotificationError(f"Email failed: {exc}") from exc

        if response.is_error:
            raise NotificationError(f"Email failed: HTTP {response.status_code} {_error_message(response)}")

        logger.info(
            "Alert email sent",
            extra={"case_number": case_number, "email_id": _email_id(response), "attachments": len(attachments)},
        )


def _error_message(response: httpx.Response) -> str:
    try:
        return str(response.json().get("message", ""))
    except ValueError:
        return response.text[:200]


def _email_id(response: httpx.Response) -> str | None:
    try:
        return response.json().get("id")
    except ValueError:
        return None

from __future__ import annotations

import base64
import json

import httpx
import pytest

from docketwatch.notify import (
    Attachment,
    NotificationError,
    ResendNotifier,
    SmtpNotifier,
    alert_subject,
    render_alert_html,
)
from docketwatch.types import ScrapedDocketEntry

ENTRIES = [
    ScrapedDocketEntry("04/20/2024", "Appellee Brief Filed", "Acme <Holdings>", True, "ctl00$x"),
    ScrapedDocketEntry("04/21/2024", "Order Entered", "", False, None),
]


def _resend(handler) -> ResendNotifier:
    notifier = ResendNotifier("re_test_key", "Monitor <alerts@example.com>")
    notifier._client.close()
    notifier._client = httpx.Client(
        base_url="https://api.resend.test",
        headers={"Authorization": "Bearer re_test_key"},
        transport=httpx.MockTransport(handler),
    )
    return notifier


def test_render_alert_html_escapes_and_pluralises():
    html = render_alert_html("M2023-1", "Doe v. Acme", ENTRIES)

    assert "2 new docket entries" in html
    assert "Acme &lt;Holdings&gt;" in html
    assert "Yes (attached)" in html
    assert "&mdash;" in html
    assert "1 new docket entry:" in render_alert_html("M2023-1", "Doe v. Acme", ENTRIES[:1])


def test_resend_payload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers["Authorization"]
        captured["json"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_123"})

    with _resend(handler) as notifier:
        notifier.send(
            "lawyer@example.com",
            "M2023-1",
            "Doe v. Acme",
            ENTRIES,
            [Attachment("M2023-1_brief.pdf", b"%PDF")],
        )

    payload = captured["json"]
    assert captured["path"] == "/emails"
    assert captured["auth"] == "Bearer re_test_key"
    assert payload["to"] == ["lawyer@example.com"]
    assert payload["subject"] == alert_subject("M2023-1") == "[TN Court Alert] New activity in M2023-1"
    assert payload["attachments"] == [
        {"filename": "M2023-1_brief.pdf", "content": base64.b64encode(b"%PDF").decode("ascii")}
    ]


def test_resend_without_attachments_omits_field():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["json"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_124"})

    with _resend(handler) as notifier:
        notifier.send("lawyer@example.com", "M2023-1", "Doe v. Acme", ENTRIES)

    assert "attachments" not in captured["json"]


def test_resend_error_raises_notification_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Invalid `to` field"})

    with _resend(handler) as notifier:
        with pytest.raises(NotificationError, match="Invalid `to` field"):
            notifier.send("bad", "M2023-1", "Doe v. Acme", ENTRIES)


def test_resend_requires_api_key():
    with pytest.raises(ValueError):
        ResendNotifier("", "Monitor <alerts@example.com>")


def test_smtp_message_has_html_and_pdf_attachment():
    notifier = SmtpNotifier("smtp.example.com", "alerts@example.com")

    message = notifier.build_message(
        "lawyer@example.com",
        "M2023-1",
        "Doe v. Acme",
        ENTRIES,
        [Attachment("brief.pdf", b"%PDF")],
    )

    assert message["Subject"] == "[TN Court Alert] New activity in M2023-1"
    attachments = list(message.iter_attachments())
    assert [part.get_filename() for part in attachments] == ["brief.pdf"]
    assert attachments[0].get_content_type() == "application/pdf"
    assert message.get_body(preferencelist=("html",)) is not None

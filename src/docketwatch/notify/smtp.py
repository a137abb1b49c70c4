from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Sequence

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


class SmtpNotifier(Notifier):
    """Sends alerts over SMTP with STARTTLS."""

    def __init__(
        self,
        host: str,
        sender: str,
        *,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.timeout = timeout

    def build_message(
        self,
        to: str,
        case_number: str,
        case_name: str,
        entries: Sequence[ScrapedDocketEntry],
        attachments: Sequence[Attachment] = (),
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = alert_subject(case_number)
        message["From"] = self.sender
        message["To"] = to
        message.set_content(render_alert_text(case_number, case_name, entries))
        message.add_alternative(render_alert_html(case_number, case_name, entries), subtype="html")
        for item in attachments:
            message.add_attachment(item.content, maintype="application", subtype="pdf", filename=item.filename)
        return message

    def send(
        self,
        to: str,
        case_number: str,
        case_name: str,
        entries: Sequence[ScrapedDocketEntry],
        attachments: Sequence[Attachment] = (),
    ) -> None:
        message = self.build_message(to, case_number, case_name, entries, attachments)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Email failed: {exc}") from exc
        logger.info("Alert email sent", extra={"case_number": case_number, "attachments": len(attachments)})

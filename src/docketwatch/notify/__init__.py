from .base import (
    Attachment,
    NotificationError,
    Notifier,
    alert_subject,
    render_alert_html,
    render_alert_text,
)
from .log import LogNotifier
from .resend import ResendNotifier
from .smtp import SmtpNotifier

__all__ = [
    "Attachment",
    "LogNotifier",
    "NotificationError",
    "Notifier",
    "ResendNotifier",
    "SmtpNotifier",
    "alert_subject",
    "render_alert_html",
    "render_alert_text",
]

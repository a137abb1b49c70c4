from __future__ import annotations

import logging
from typing import Sequence

from docketwatch.notify.base import Attachment, Notifier, render_alert_text
from docketwatch.types import ScrapedDocketEntry

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    """Dry-run notifier: writes the alert to the log instead of sending it."""

    def send(
        self,
        to: str,
        case_number: str,
        case_name: str,
        entries: Sequence[ScrapedDocketEntry],
        attachments: Sequence[Attachment] = (),
    ) -> None:
        logger.info(
            "Alert for %s (not sent)\n%s",
            to,
            render_alert_text(case_number, case_name, entries),
            extra={"case_number": case_number, "attachments": [item.filename for item in attachments]},
        )

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Protocol, Sequence

from docketwatch.types import ScrapedDocketEntry

SITE_HOME = "https://pch.tncourts.gov/"


class NotificationError(RuntimeError):
    """Raised when an alert could not be delivered."""


@dataclass(slots=True)
class Attachment:
    filename: str
    content: bytes


class Notifier(Protocol):
    """Interface for delivering one alert about new docket entries."""

    def send(
        self,
        to: str,
        case_number: str,
        case_name: str,
        entries: Sequence[ScrapedDocketEntry],
        attachments: Sequence[Attachment] = (),
    ) -> None:
        """Deliver the alert or raise NotificationError."""


def alert_subject(case_number: str) -> str:
    return f"[TN Court Alert] New activity in {case_number}"


def render_alert_text(case_number: str, case_name: str, entries: Sequence[ScrapedDocketEntry]) -> str:
    noun = "entry" if len(entries) == 1 else "entries"
    lines = [
        f"Case: {case_number}",
        f"Style: {case_name}",
        f"{len(entries)} new docket {noun}:",
        "",
    ]
    for entry in entries:
        pdf = "PDF" if entry.has_pdf else "no PDF"
        lines.append(f"- {entry.date}  {entry.event}  ({entry.filer or 'n/a'}, {pdf})")
    lines.extend(["", f"View case: {SITE_HOME}"])
    return "\n".join(lines)


_CELL = 'style="padding: 8px; border: 1px solid #ddd;"'
_HEAD = 'style="padding: 8px; border: 1px solid #ddd; text-align: left;"'


def render_alert_html(case_number: str, case_name: str, entries: Sequence[ScrapedDocketEntry]) -> str:
    rows = "".join(
        "<tr>"
        f"<td {_CELL}>{html.escape(entry.date)}</td>"
        f"<td {_CELL}>{html.escape(entry.event)}</td>"
        f"<td {_CELL}>{html.escape(entry.filer) or '&mdash;'}</td>"
        f"<td {_CELL}>{'Yes (attached)' if entry.has_pdf else 'No'}</td>"
        "</tr>"
        for entry in entries
    )
    noun = "entry" if len(entries) == 1 else "entries"
    headers = "".join(f"<th {_HEAD}>{label}</th>" for label in ("Date", "Event", "Filer", "PDF"))
    return (
        '<div style="font-family: sans-serif; max-width: 600px;">'
        '<h2 style="color: #1a1a2e;">New Court Activity</h2>'
        f"<p><strong>Case:</strong> {html.escape(case_number)}</p>"
        f"<p><strong>Style:</strong> {html.escape(case_name)}</p>"
        f"<p>{len(entries)} new docket {noun}:</p>"
        '<table style="border-collapse: collapse; width: 100%; margin: 16px 0;">'
        f'<thead><tr style="background: #f5f5f5;">{headers}</tr></thead>'
        f"<tbody>{rows}</tbody>"
        "</table>"
        f'<p style="color: #666; font-size: 13px;">View case: <a href="{SITE_HOME}">pch.tncourts.gov</a></p>'
        "</div>"
    )

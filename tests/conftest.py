from __future__ import annotations

import html
from pathlib import Path

import pytest

from docketwatch.notify import NotificationError
from docketwatch.storage import DocketStore, create_session_factory, init_db

FIXTURES = Path(__file__).parent / "fixtures"

HIDDEN_FIELDS = """
<input type="hidden" name="__VIEWSTATE" id="__VIEWSTATE" value="vs-token" />
<input type="hidden" name="__VIEWSTATEGENERATOR" id="__VIEWSTATEGENERATOR" value="gen-token" />
<input type="hidden" name="__EVENTVALIDATION" id="__EVENTVALIDATION" value="ev-token" />
"""


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    def send(self, to, case_number, case_name, entries, attachments=()):
        if self.fail:
            raise NotificationError("Email failed: mailbox unavailable")
        self.sent.append(
            {
                "to": to,
                "case_number": case_number,
                "case_name": case_name,
                "entries": list(entries),
                "attachments": list(attachments),
            }
        )


def build_case_page(rows, *, case_name="Jane Doe v. Acme", case_number="M2023-01234-COA-R3-CV") -> str:
    """Render a case details page; each row is (date, event, filer, postback_target_or_None)."""

    body = []
    for date, event, filer, target in rows:
        link = f"<a href=\"javascript:__doPostBack('{target}','')\">View</a>" if target else ""
        body.append(
            f"<tr><td>{html.escape(date)}</td><td>{html.escape(event)}</td>"
            f"<td>{html.escape(filer)}</td><td>{link}</td></tr>"
        )
    return (
        f"<html><body><form>{HIDDEN_FIELDS}"
        "<h1>Tennessee State Courts</h1><h2>Public Case History</h2>"
        f"<h1>{html.escape(case_name)}</h1><h2>{case_number}</h2>"
        "<h3>Case History</h3><table>"
        "<tr><th>Date</th><th>Event</th><th>Filer</th><th>PDF</th></tr>"
        f"{''.join(body)}</table></form></body></html>"
    )


@pytest.fixture
def case_page_html() -> str:
    return (FIXTURES / "case_details.html").read_text(encoding="utf-8")


@pytest.fixture
def security_notice_html() -> str:
    return (FIXTURES / "security_notice.html").read_text(encoding="utf-8")


@pytest.fixture
def store(tmp_path) -> DocketStore:
    session_factory, engine = create_session_factory(f"sqlite:///{tmp_path / 'docketwatch.db'}")
    init_db(engine)
    return DocketStore(session_factory)

from __future__ import annotations

from urllib.parse import parse_qs

from docketwatch.postback import PostbackClient
from docketwatch.site import CourtSite
from docketwatch.transport import StaticTransport, TransportError, canned_response

CASE_URL = "https://pch.tncourts.gov/CaseDetails.aspx?id=30247&Number=True"
TARGET = "ctl00$MainContent$gvHistory$ctl04$lnkPdf"


def _client(transport: StaticTransport) -> PostbackClient:
    return PostbackClient(CourtSite(transport), timeout=7.5)


def test_fetch_attachment_replays_tokens_and_cookie(case_page_html):
    transport = StaticTransport()
    transport.add(
        CASE_URL,
        canned_response(
            case_page_html,
            headers=[
                ("Set-Cookie", "ASP.NET_SessionId=abc123; path=/; HttpOnly"),
                ("Set-Cookie", "TS01=xyz; Path=/"),
            ],
        ),
    )
    transport.add(
        CASE_URL,
        canned_response(b"%PDF-1.4 brief", headers={"Content-Type": "application/pdf"}),
        method="POST",
    )

    content = _client(transport).fetch_attachment("30247", TARGET)

    assert content == b"%PDF-1.4 brief"
    post = transport.requests_for(CASE_URL, method="POST")[0]
    assert post.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert post.headers["Cookie"] == "ASP.NET_SessionId=abc123; TS01=xyz"
    assert post.timeout == 7.5
    form = parse_qs(post.body, keep_blank_values=True)
    assert form["__VIEWSTATE"] == ["dDwtMTI3OTMzNDM4NDs7Pg=="]
    assert form["__VIEWSTATEGENERATOR"] == ["A1B2C3D4"]
    assert form["__EVENTVALIDATION"] == ["/wEdAAOeventvalidation"]
    assert form["__EVENTTARGET"] == [TARGET]
    assert form["__EVENTARGUMENT"] == [""]


def test_octet_stream_is_accepted(case_page_html):
    transport = StaticTransport()
    transport.add(CASE_URL, canned_response(case_page_html))
    transport.add(
        CASE_URL,
        canned_response(b"binary", headers={"Content-Type": "application/octet-stream"}),
        method="POST",
    )

    assert _client(transport).fetch_attachment("30247", TARGET) == b"binary"


def test_missing_tokens_returns_none_without_posting(security_notice_html):
    transport = StaticTransport()
    transport.add(CASE_URL, canned_response(security_notice_html))

    assert _client(transport).fetch_attachment("30247", TARGET) is None
    assert transport.requests_for(CASE_URL, method="POST") == []


def test_html_response_to_postback_returns_none(case_page_html):
    transport = StaticTransport()
    transport.add(CASE_URL, canned_response(case_page_html))
    transport.add(
        CASE_URL,
        canned_response("<html>error</html>", headers={"Content-Type": "text/html; charset=utf-8"}),
        method="POST",
    )

    assert _client(transport).fetch_attachment("30247", TARGET) is None


def test_transport_failure_returns_none(case_page_html):
    transport = StaticTransport()
    transport.add(CASE_URL, canned_response(case_page_html))
    transport.add(CASE_URL, TransportError("read timeout"), method="POST")

    assert _client(transport).fetch_attachment("30247", TARGET) is None


def test_each_fetch_performs_its_own_get(case_page_html):
    transport = StaticTransport()
    transport.add(CASE_URL, canned_response(case_page_html))
    transport.add(
        CASE_URL,
        canned_response(b"%PDF", headers={"Content-Type": "application/pdf"}),
        method="POST",
    )
    client = _client(transport)

    client.fetch_attachment("30247", TARGET)
    client.fetch_attachment("30247", "ctl00$other")

    assert len(transport.requests_for(CASE_URL)) == 2
    assert len(transport.requests_for(CASE_URL, method="POST")) == 2

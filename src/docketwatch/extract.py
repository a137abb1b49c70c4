"""
HTML extraction for the court's case details page.

Every assumption about the site template lives in this module. A page that matches none of the
known patterns produces an empty result rather than an exception, so "the layout changed" and
"the case has no rows" look the same to callers.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from docketwatch.types import CaseIdentity, DocketTable, ScrapedDocketEntry, WebFormsState

CASE_HISTORY_HEADING = "Case History"
_POSTBACK_TARGET = re.compile(r"__doPostBack\('([^']+)'")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _text(node: Tag) -> str:
    return node.get_text().strip()


def _case_heading(soup: BeautifulSoup, name: str) -> str:
    # Site chrome repeats h1/h2 above the case-specific ones; the case heading is the second.
    headings = soup.find_all(name)
    if not headings:
        return ""
    return _text(headings[1] if len(headings) > 1 else headings[0])


def parse_case_identity(html: str, *, internal_id: str, url: str) -> CaseIdentity | None:
    soup = _soup(html)
    case_number = _case_heading(soup, "h2")
    if not case_number:
        return None
    return CaseIdentity(
        case_number=case_number,
        case_name=_case_heading(soup, "h1"),
        internal_id=internal_id,
        url=url,
    )


def _own_rows(table: Tag) -> list[Tag]:
    # Rows of nested tables belong to those tables, not to this one.
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def _find_history_table(soup: BeautifulSoup) -> Tag | None:
    # Later matches in document order are the innermost ones on layout-table pages.
    for heading in reversed(soup.find_all("h3")):
        if _text(heading) == CASE_HISTORY_HEADING:
            table = heading.find_next_sibling("table")
            if table is not None:
                return table

    for table in reversed(soup.find_all("table")):
        header_texts = {_text(th) for row in _own_rows(table) for th in row.find_all("th", recursive=False)}
        if {"Date", "Event"} <= header_texts:
            return table
    return None


def _parse_row(row: Tag) -> ScrapedDocketEntry | None:
    cells = row.find_all("td", recursive=False)
    if len(cells) < 3:
        return None

    has_pdf = False
    target: str | None = None
    if len(cells) > 3:
        link = cells[3].find("a")
        if link is not None:
            has_pdf = True
            match = _POSTBACK_TARGET.search(link.get("href") or "")
            if match:
                target = match.group(1)

    return ScrapedDocketEntry(
        date=_text(cells[0]),
        event=_text(cells[1]),
        filer=_text(cells[2]),
        has_pdf=has_pdf,
        pdf_postback_target=target,
    )


def parse_docket_table(html: str) -> DocketTable:
    soup = _soup(html)
    table = DocketTable(case_name=_case_heading(soup, "h1"))

    history = _find_history_table(soup)
    if history is None:
        return table

    for row in _own_rows(history):
        entry = _parse_row(row)
        if entry is not None:
            table.entries.append(entry)
    return table


def _hidden_value(soup: BeautifulSoup, name: str) -> str:
    field = soup.find("input", id=name) or soup.find("input", attrs={"name": name})
    if field is None:
        return ""
    return str(field.get("value") or "")


def parse_hidden_fields(html: str) -> WebFormsState | None:
    """Return the postback tokens, or None when the page is not a recognisable WebForms page."""

    soup = _soup(html)
    view_state = _hidden_value(soup, "__VIEWSTATE")
    event_validation = _hidden_value(soup, "__EVENTVALIDATION")
    if not view_state or not event_validation:
        return None
    return WebFormsState(
        view_state=view_state,
        view_state_generator=_hidden_value(soup, "__VIEWSTATEGENERATOR"),
        event_validation=event_validation,
    )

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CaseIdentity:
    case_number: str
    case_name: str
    internal_id: str
    url: str


@dataclass(slots=True)
class ScrapedDocketEntry:
    date: str
    event: str
    filer: str
    has_pdf: bool = False
    pdf_postback_target: str | None = None


@dataclass(slots=True)
class DocketTable:
    """Rows of the "Case History" table in rendered order."""

    entries: list[ScrapedDocketEntry] = field(default_factory=list)
    case_name: str = ""
    blocked: bool = False


@dataclass(slots=True)
class WebFormsState:
    """Hidden fields a WebForms page expects to be echoed back on postback."""

    view_state: str
    view_state_generator: str
    event_validation: str

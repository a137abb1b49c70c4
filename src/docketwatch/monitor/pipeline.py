from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from docketwatch.diff import diff_entries
from docketwatch.notify import Attachment, Notifier
from docketwatch.postback import PostbackClient
from docketwatch.site import CourtSite
from docketwatch.storage import ALERT_EMAIL_KEY, DocketStore, TrackedCaseRecord
from docketwatch.types import ScrapedDocketEntry

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class AlertDestinationMissing(ValueError):
    """Raised when no alert e-mail address is configured."""


@dataclass
class CaseCheckResult:
    """Outcome of checking one tracked case."""

    case_id: int
    case_number: str
    new_entries: int = 0
    attachments: int = 0
    blocked: bool = False
    skipped: bool = False
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        if self.skipped:
            return "skipped"
        return "ok-new-entries" if self.new_entries else "ok-no-change"


@dataclass
class CheckSummary:
    """Counters returned to the CLI and tests."""

    checked: int = 0
    results: list[CaseCheckResult] = field(default_factory=list)

    @property
    def new_entries(self) -> int:
        return sum(result.new_entries for result in self.results)

    @property
    def errors(self) -> int:
        return sum(1 for result in self.results if result.error is not None)

    def as_dict(self) -> dict[str, Any]:
        return {
            "checked": self.checked,
            "results": [{**asdict(result), "status": result.status} for result in self.results],
        }


def attachment_filename(case_number: str, entry: ScrapedDocketEntry) -> str:
    def safe(value: str) -> str:
        return _UNSAFE_FILENAME_CHARS.sub("_", value)

    return f"{safe(case_number)}_{safe(entry.date)}_{safe(entry.event)[:50]}.pdf"


class DocketMonitor:
    """
    Runs one check cycle over every tracked case.

    Cases are processed one at a time. Whatever goes wrong with one case (network, parsing,
    e-mail) is recorded on that case's result and the cycle moves on, so the returned summary
    always covers every case. Re-running a cycle is safe: entries are inserted with
    insert-or-ignore semantics and only rows that were actually inserted are alerted on.
    """

    def __init__(
        self,
        site: CourtSite,
        postback: PostbackClient,
        store: DocketStore,
        notifier: Notifier,
        *,
        attachment_limit: int | None = 3,
        default_alert_email: str | None = None,
    ) -> None:
        self.site = site
        self.postback = postback
        self.store = store
        self.notifier = notifier
        self.attachment_limit = attachment_limit
        self.default_alert_email = default_alert_email

    def resolve_destination(self, alert_email: str | None = None) -> str:
        destination = alert_email or self.store.get_setting(ALERT_EMAIL_KEY) or self.default_alert_email
        if not destination:
            raise AlertDestinationMissing("No alert email configured")
        return destination

    def run(self, alert_email: str | None = None) -> CheckSummary:
        destination = self.resolve_destination(alert_email)
        cases = self.store.list_cases()
        summary = CheckSummary(checked=len(cases))
        logger.info("Starting check cycle", extra={"cases": len(cases)})

        for case in cases:
            result = CaseCheckResult(case_id=case.id, case_number=case.case_number)
            summary.results.append(result)
            if not case.internal_id:
                result.skipped = True
                logger.info("Skipping case without a site id", extra={"case_number": case.case_number})
                continue

            try:
                self._check_case(case, destination, result)
            except Exception as exc:
                result.error = str(exc) or exc.__class__.__name__
                logger.exception("Failed to check case", extra={"case_number": case.case_number})

        logger.info(
            "Check cycle finished",
            extra={"cases": summary.checked, "new_entries": summary.new_entries, "errors": summary.errors},
        )
        return summary

    def _check_case(self, case: TrackedCaseRecord, destination: str, result: CaseCheckResult) -> None:
        table = self.site.scrape_docket(case.internal_id)
        result.blocked = table.blocked

        candidates = diff_entries(table.entries, self.store.existing_entries(case.id))
        new_entries: list[ScrapedDocketEntry] = []
        for position, entry in enumerate(candidates):
            try:
                inserted = self.store.insert_entry(case.id, entry)
            except Exception:
                # Rows inserted so far are committed and will not be alerted on by a later cycle.
                logger.error(
                    "Persisting docket entries failed part way; stored entries will not be alerted",
                    extra={
                        "case_number": case.case_number,
                        "persisted": len(new_entries),
                        "remaining": len(candidates) - position,
                    },
                )
                raise
            if inserted:
                new_entries.append(entry)
        result.new_entries = len(new_entries)
        if not new_entries:
            logger.debug("No new docket entries", extra={"case_number": case.case_number})
            return

        attachments = self._fetch_attachments(case, new_entries)
        result.attachments = len(attachments)

        case_name = table.case_name or case.case_name or "Unknown"
        self.notifier.send(destination, case.case_number, case_name, new_entries, attachments)
        self.store.record_alert(case.id, len(new_entries))
        logger.info(
            "Alert sent",
            extra={
                "case_number": case.case_number,
                "new_entries": len(new_entries),
                "attachments": len(attachments),
            },
        )

    def _fetch_attachments(
        self,
        case: TrackedCaseRecord,
        entries: list[ScrapedDocketEntry],
    ) -> list[Attachment]:
        """
        Download PDFs for new entries, up to `attachment_limit` attempts per case.

        Each download is a full GET + POST round trip, so a large first import would otherwise spend
        most of the cycle on attachments.
        """

        attachments: list[Attachment] = []
        attempts = 0
        for entry in entries:
            if not entry.has_pdf or not entry.pdf_postback_target:
                continue
            if self.attachment_limit is not None and attempts >= self.attachment_limit:
                logger.info(
                    "Attachment limit reached; remaining PDFs not downloaded",
                    extra={"case_number": case.case_number, "limit": self.attachment_limit},
                )
                break
            attempts += 1
            try:
                content = self.postback.fetch_attachment(case.internal_id, entry.pdf_postback_target)
            except Exception:
                logger.exception(
                    "Attachment download raised",
                    extra={"case_number": case.case_number, "event": entry.event},
                )
                continue
            if content is not None:
                attachments.append(Attachment(attachment_filename(case.case_number, entry), content))
        return attachments

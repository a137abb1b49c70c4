from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from docketwatch.storage.models import AlertRecord, DocketEntryRecord, SettingRecord, TrackedCaseRecord
from docketwatch.types import CaseIdentity, ScrapedDocketEntry

logger = logging.getLogger(__name__)

ALERT_EMAIL_KEY = "alert_email"


class DuplicateCaseError(ValueError):
    """Raised when a case number is already tracked."""


@dataclass(slots=True)
class AlertSummary:
    id: int
    case_id: int
    entries_count: int
    sent_at: datetime
    case_number: str
    case_name: str | None


class DocketStore:
    """
    Persistence operations used by the monitor and the CLI.

    Writes that must be atomic on their own (one docket entry, one alert) each run in a dedicated
    session so a crash mid-cycle leaves every committed row intact.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def add_case(self, identity: CaseIdentity) -> TrackedCaseRecord:
        record = TrackedCaseRecord(
            case_number=identity.case_number,
            case_name=identity.case_name or None,
            case_url=identity.url,
            internal_id=identity.internal_id,
        )
        with self.session_factory() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateCaseError(f"Case {identity.case_number} is already being tracked") from exc
        logger.info("Tracking case", extra={"case_id": record.id, "case_number": record.case_number})
        return record

    def list_cases(self) -> list[TrackedCaseRecord]:
        with self.session_factory() as session:
            return list(
                session.scalars(
                    select(TrackedCaseRecord).order_by(
                        TrackedCaseRecord.created_at.desc(), TrackedCaseRecord.id.desc()
                    )
                )
            )

    def get_case(self, case_id: int) -> TrackedCaseRecord | None:
        with self.session_factory() as session:
            return session.get(TrackedCaseRecord, case_id)

    def remove_case(self, case_id: int) -> bool:
        with self.session_factory() as session:
            record = session.get(TrackedCaseRecord, case_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
        logger.info("Stopped tracking case", extra={"case_id": case_id})
        return True

    def existing_entries(self, case_id: int) -> list[tuple[str, str, str]]:
        with self.session_factory() as session:
            rows = session.execute(
                select(DocketEntryRecord.entry_date, DocketEntryRecord.event, DocketEntryRecord.filer)
                .where(DocketEntryRecord.case_id == case_id)
            )
            return [(row.entry_date, row.event, row.filer) for row in rows]

    def insert_entry(self, case_id: int, entry: ScrapedDocketEntry) -> bool:
        """Insert-or-ignore. Returns False when the identity key is already stored."""

        with self.session_factory() as session:
            session.add(
                DocketEntryRecord(
                    case_id=case_id,
                    entry_date=entry.date,
                    event=entry.event,
                    filer=entry.filer,
                    has_pdf=entry.has_pdf,
                    pdf_postback_target=entry.pdf_postback_target,
                )
            )
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug(
                    "Docket entry already stored",
                    extra={"case_id": case_id, "entry_date": entry.date, "event": entry.event},
                )
                return False
        return True

    def record_alert(self, case_id: int, entries_count: int) -> int:
        with self.session_factory() as session:
            alert = AlertRecord(case_id=case_id, entries_count=entries_count)
            session.add(alert)
            session.commit()
            return alert.id

    def recent_alerts(self, limit: int = 20) -> list[AlertSummary]:
        with self.session_factory() as session:
            rows = session.execute(
                select(AlertRecord, TrackedCaseRecord.case_number, TrackedCaseRecord.case_name)
                .join(TrackedCaseRecord, AlertRecord.case_id == TrackedCaseRecord.id)
                .order_by(AlertRecord.sent_at.desc(), AlertRecord.id.desc())
                .limit(limit)
            )
            return [
                AlertSummary(
                    id=alert.id,
                    case_id=alert.case_id,
                    entries_count=alert.entries_count,
                    sent_at=alert.sent_at,
                    case_number=case_number,
                    case_name=case_name,
                )
                for alert, case_number, case_name in rows
            ]

    def get_setting(self, key: str) -> str | None:
        with self.session_factory() as session:
            setting = session.get(SettingRecord, key)
            return setting.value if setting is not None else None

    def set_setting(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            session.merge(SettingRecord(key=key, value=value))
            session.commit()

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TrackedCaseRecord(Base):
    """A case the monitor checks on every cycle."""

    __tablename__ = "cases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    case_name: Mapped[str | None] = mapped_column(String, nullable=True)
    case_url: Mapped[str | None] = mapped_column(String, nullable=True)
    internal_id: Mapped[str | None] = mapped_column(String, nullable=True)  # site id used in URLs
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    entries: Mapped[list[DocketEntryRecord]] = relationship(
        back_populates="case", cascade="all, delete-orphan", passive_deletes=True
    )
    alerts: Mapped[list[AlertRecord]] = relationship(
        back_populates="case", cascade="all, delete-orphan", passive_deletes=True
    )


class DocketEntryRecord(Base):
    """
    One row of a case's history table, written once when first seen.

    The unique constraint over (case, date, event, filer) is the dedup key: inserting a row that is
    already present is a no-op, which is what makes re-running a check cycle safe.
    """

    __tablename__ = "docket_entries"
    __table_args__ = (
        UniqueConstraint(
            "case_id",
            "entry_date",
            "event",
            "filer",
            name="uq_docket_entry_identity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    entry_date: Mapped[str] = mapped_column(String, nullable=False)  # as rendered by the site
    event: Mapped[str] = mapped_column(Text, nullable=False)
    filer: Mapped[str] = mapped_column(String, nullable=False)
    has_pdf: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    pdf_postback_target: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    case: Mapped[TrackedCaseRecord] = relationship(back_populates="entries")


class AlertRecord(Base):
    """One notification sent for a case during a check cycle."""

    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    entries_count: Mapped[int] = mapped_column(Integer, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    case: Mapped[TrackedCaseRecord] = relationship(back_populates="alerts")


class SettingRecord(Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

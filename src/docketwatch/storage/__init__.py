from .database import create_session_factory, init_db
from .models import AlertRecord, Base, DocketEntryRecord, SettingRecord, TrackedCaseRecord
from .store import ALERT_EMAIL_KEY, AlertSummary, DocketStore, DuplicateCaseError

__all__ = [
    "ALERT_EMAIL_KEY",
    "AlertRecord",
    "AlertSummary",
    "Base",
    "DocketEntryRecord",
    "DocketStore",
    "DuplicateCaseError",
    "SettingRecord",
    "TrackedCaseRecord",
    "create_session_factory",
    "init_db",
]

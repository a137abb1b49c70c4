from .pipeline import (
    AlertDestinationMissing,
    CaseCheckResult,
    CheckSummary,
    DocketMonitor,
    attachment_filename,
)

__all__ = [
    "AlertDestinationMissing",
    "CaseCheckResult",
    "CheckSummary",
    "DocketMonitor",
    "attachment_filename",
]

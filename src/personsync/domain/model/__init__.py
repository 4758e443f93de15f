"""Domain model for CSV import reconciliation."""

from __future__ import annotations

from .enums import ExistenceStatus, ProcessAction, ProcessingStatus
from .records import (
    CheckFailed,
    Checking,
    ExistenceState,
    Failed,
    Found,
    ImportRecord,
    InProgress,
    NotChecked,
    NotFound,
    ProcessingState,
    RawRow,
    Succeeded,
    Unprocessed,
)

__all__ = [
    "CheckFailed",
    "Checking",
    "ExistenceState",
    "ExistenceStatus",
    "Failed",
    "Found",
    "ImportRecord",
    "InProgress",
    "NotChecked",
    "NotFound",
    "ProcessAction",
    "ProcessingState",
    "ProcessingStatus",
    "RawRow",
    "Succeeded",
    "Unprocessed",
]

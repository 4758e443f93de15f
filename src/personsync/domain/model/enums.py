"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ExistenceStatus(StrEnum):
    IDLE = "idle"
    CHECKING = "checking"
    EXISTS = "exists"
    NOT_FOUND = "not_found"
    CHECK_ERROR = "check_error"

    @property
    def is_known(self) -> bool:
        """Whether the existence check has produced a result (of any kind)."""

        return self not in {ExistenceStatus.IDLE, ExistenceStatus.CHECKING}


class ProcessingStatus(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class ProcessAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"

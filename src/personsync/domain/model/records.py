"""Import records and their two independent state axes.

Each axis is a closed family of small frozen dataclasses. A record holds exactly
one member of each family; ``personsync.domain.record_state`` is the only place
that moves a record from one member to another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from personsync.domain.ports.directory import DirectoryId  # noqa: TC001

from .enums import ExistenceStatus, ProcessAction, ProcessingStatus

# -- existence axis ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NotChecked:
    status: ClassVar[ExistenceStatus] = ExistenceStatus.IDLE


@dataclass(frozen=True, slots=True)
class Checking:
    status: ClassVar[ExistenceStatus] = ExistenceStatus.CHECKING


@dataclass(frozen=True, slots=True)
class Found:
    directory_id: DirectoryId
    status: ClassVar[ExistenceStatus] = ExistenceStatus.EXISTS


@dataclass(frozen=True, slots=True)
class NotFound:
    status: ClassVar[ExistenceStatus] = ExistenceStatus.NOT_FOUND


@dataclass(frozen=True, slots=True)
class CheckFailed:
    message: str
    status: ClassVar[ExistenceStatus] = ExistenceStatus.CHECK_ERROR


type ExistenceState = NotChecked | Checking | Found | NotFound | CheckFailed

# -- processing axis --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Unprocessed:
    status: ClassVar[ProcessingStatus] = ProcessingStatus.IDLE


@dataclass(frozen=True, slots=True)
class InProgress:
    status: ClassVar[ProcessingStatus] = ProcessingStatus.PROCESSING


@dataclass(frozen=True, slots=True)
class Succeeded:
    action: ProcessAction
    directory_id: DirectoryId
    message: str
    status: ClassVar[ProcessingStatus] = ProcessingStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class Failed:
    message: str
    status: ClassVar[ProcessingStatus] = ProcessingStatus.ERROR


type ProcessingState = Unprocessed | InProgress | Succeeded | Failed


@dataclass(frozen=True, slots=True)
class RawRow:
    """One parsed CSV data row. ``position`` is the zero-based data line index."""

    position: int
    first_name: str
    last_name: str
    email: str


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """A CSV row tracked through existence checking and processing."""

    id: str
    first_name: str
    last_name: str
    email: str
    existence: ExistenceState = field(default_factory=NotChecked)
    processing: ProcessingState = field(default_factory=Unprocessed)
    directory_id: DirectoryId | None = None

    @property
    def existence_status(self) -> ExistenceStatus:
        return self.existence.status

    @property
    def processing_status(self) -> ProcessingStatus:
        return self.processing.status

    @property
    def existence_message(self) -> str | None:
        match self.existence:
            case Found(directory_id=directory_id):
                return f"Directory ID: {directory_id}"
            case CheckFailed(message=message):
                return message
            case _:
                return None

    @property
    def processing_message(self) -> str | None:
        match self.processing:
            case Succeeded(message=message) | Failed(message=message):
                return message
            case _:
                return None

"""Transition functions for the two record state axes.

Every function is pure: it receives a record and returns the successor record,
or ``None`` when the transition is not allowed from the current state. Callers
treat ``None`` as a no-op.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from .model import (
    CheckFailed,
    Checking,
    Failed,
    Found,
    ImportRecord,
    InProgress,
    NotChecked,
    NotFound,
    ProcessAction,
    Succeeded,
    Unprocessed,
)

if TYPE_CHECKING:
    from .ports.directory import DirectoryId, DirectoryPerson

log = getLogger(__name__)


def request_check(record: ImportRecord, *, requeue: bool = False) -> ImportRecord | None:
    """Move the existence axis into ``checking``.

    Without ``requeue`` only unchecked records qualify. With ``requeue`` records
    whose previous check ended in ``not_found`` or ``check_error`` qualify too,
    unless a processing action is running or has already succeeded.
    """

    match record.existence:
        case NotChecked():
            return replace(record, existence=Checking())
        case NotFound() | CheckFailed():
            if not requeue or isinstance(record.processing, (InProgress, Succeeded)):
                return None
            return replace(record, existence=Checking())
        case Checking() | Found():
            return None
        case _ as unreachable:
            assert_never(unreachable)


def resolve_check(record: ImportRecord, person: DirectoryPerson | None) -> ImportRecord | None:
    """Apply a completed existence check."""

    if not isinstance(record.existence, Checking):
        return None
    if person is None:
        return replace(record, existence=NotFound())
    return replace(
        record,
        existence=Found(directory_id=person.id),
        directory_id=_keep_directory_id(record, person.id),
    )


def fail_check(record: ImportRecord, message: str) -> ImportRecord | None:
    if not isinstance(record.existence, Checking):
        return None
    return replace(record, existence=CheckFailed(message=message))


def start_processing(record: ImportRecord) -> ImportRecord | None:
    """Enter ``processing``; rejected while existence is still unknown."""

    if not record.existence_status.is_known:
        return None
    match record.processing:
        case Unprocessed() | Failed():
            return replace(record, processing=InProgress())
        case InProgress() | Succeeded():
            return None
        case _ as unreachable:
            assert_never(unreachable)


def complete_processing(
    record: ImportRecord,
    *,
    action: ProcessAction,
    directory_id: DirectoryId,
    message: str,
) -> ImportRecord | None:
    """Finish a processing action successfully.

    A created person's id replaces whatever id the record carried; an update only
    fills the id in when the record had none.
    """

    if not isinstance(record.processing, InProgress):
        return None
    resulting_id = resolve_directory_id(record, action=action, directory_id=directory_id)
    return replace(
        record,
        existence=Found(directory_id=resulting_id),
        processing=Succeeded(action=action, directory_id=resulting_id, message=message),
        directory_id=resulting_id,
    )


def resolve_directory_id(
    record: ImportRecord, *, action: ProcessAction, directory_id: DirectoryId
) -> DirectoryId:
    """The id a successful ``action`` leaves on ``record``."""

    if action is ProcessAction.CREATED:
        return directory_id
    return _keep_directory_id(record, directory_id)


def fail_processing(record: ImportRecord, message: str) -> ImportRecord | None:
    if not isinstance(record.processing, InProgress):
        return None
    return replace(record, processing=Failed(message=message))


def _keep_directory_id(record: ImportRecord, candidate: DirectoryId) -> DirectoryId:
    if record.directory_id is None:
        return candidate
    if record.directory_id != candidate:
        log.warning(
            "Record %s already bound to directory id %s; ignoring %s",
            record.id,
            record.directory_id,
            candidate,
        )
    return record.directory_id

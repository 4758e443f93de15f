"""Orchestration of existence checks and processing actions for an import."""

from __future__ import annotations

import asyncio
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from personsync.config.reconcile import DEFAULT_BATCH_SIZE

from .csv_import import count_data_lines, parse_csv
from .model import ExistenceStatus, ProcessAction
from .ports.directory import DirectoryError
from .record_state import (
    complete_processing,
    fail_check,
    fail_processing,
    request_check,
    resolve_check,
    resolve_directory_id,
    start_processing,
)
from .scheduler import BatchScheduler
from .session import ImportSession

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .csv_import import HeaderNames
    from .model import ImportRecord
    from .ports.directory import DirectoryId, DirectoryPort

log = getLogger(__name__)


class ReconciliationDriver:
    """Drive one import session at a time against a directory.

    Loading a new file replaces the current session. Responses that arrive for a
    replaced session are discarded instead of being applied.
    """

    def __init__(self, directory: DirectoryPort, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._directory = directory
        self._batch_size = batch_size
        self._generation = 0
        self._session: ImportSession | None = None

    @property
    def session(self) -> ImportSession | None:
        return self._session

    def submit_file(self, text: str, headers: HeaderNames | None = None) -> ImportSession:
        """Parse ``text`` and start a fresh session for its rows.

        Raises :class:`~personsync.domain.csv_import.HeaderMismatch` before any
        state changes when a required header is missing.
        """

        rows = parse_csv(text, headers)
        data_lines = count_data_lines(text)
        self._generation += 1
        session = ImportSession.from_rows(
            rows,
            generation=self._generation,
            scheduler=BatchScheduler(self._batch_size),
            skipped_rows=max(data_lines - len(rows), 0),
        )
        self._session = session
        if session.total == 0:
            log.warning("No valid records found in the submitted file")
        log.info(
            "Started import session %s (generation %s): %s record(s), %s row(s) skipped",
            session.id,
            session.generation,
            session.total,
            session.skipped_rows,
        )
        return session

    def get_records(self, session: ImportSession) -> tuple[ImportRecord, ...]:
        return session.records

    def is_current(self, session: ImportSession) -> bool:
        return session is self._session and session.generation == self._generation

    async def request_more_checks(self, session: ImportSession) -> int:
        """Handle one demand signal: check the next window of records.

        Returns the number of existence checks issued. At the end of the list,
        or for a replaced session, this is a no-op returning ``0``.
        """

        if not self.is_current(session):
            log.debug("Ignoring demand signal for replaced session %s", session.id)
            return 0
        batch = session.take_batch()
        if not batch:
            return 0
        await self._run_checks(session, batch)
        log.info(
            "Existence checks: %s/%s records checked in session %s",
            session.checked_count,
            session.total,
            session.id,
        )
        return len(batch)

    async def recheck_records(
        self, session: ImportSession, record_ids: Iterable[str] | None = None
    ) -> int:
        """Explicitly re-queue finished existence checks.

        Without ``record_ids`` every record in ``check_error`` is re-queued. Named
        records are re-queued from ``check_error`` or ``not_found``.
        """

        if not self.is_current(session):
            return 0
        if record_ids is None:
            record_ids = [
                record.id
                for record in session.records
                if record.existence_status is ExistenceStatus.CHECK_ERROR
            ]
        batch: list[ImportRecord] = []
        for record_id in record_ids:
            marked = session.apply(record_id, partial(request_check, requeue=True))
            if marked is None:
                log.debug("Record %s not eligible for a new existence check", record_id)
                continue
            batch.append(marked)
        if batch:
            await self._run_checks(session, batch)
        return len(batch)

    async def process_record(
        self,
        session: ImportSession,
        record_id: str,
        attribute_key: str,
        attribute_value: str,
    ) -> None:
        """Create or update the directory person for one record.

        Never raises for directory failures; the outcome lands in the record's
        processing state and message. Calls for records that are not ready, are
        already processing or have succeeded are no-ops.
        """

        if not self.is_current(session):
            log.debug("Ignoring processing request for replaced session %s", session.id)
            return
        if session.get(record_id) is None:
            log.warning("Unknown record %s in session %s", record_id, session.id)
            return
        record = session.apply(record_id, start_processing)
        if record is None:
            log.debug("Processing request for record %s rejected by its current state", record_id)
            return

        try:
            action, directory_id = await self._create_or_update(
                record, attribute_key, attribute_value
            )
        except DirectoryError as exc:
            if self._discard_if_stale(session, record_id):
                return
            log.warning("Processing failed for record %s: %s", record_id, exc)
            session.apply(record_id, partial(fail_processing, message=f"Error: {exc}"))
            return

        if self._discard_if_stale(session, record_id):
            return
        current = session.get(record_id)
        if current is not None:
            directory_id = resolve_directory_id(current, action=action, directory_id=directory_id)
        if action is ProcessAction.UPDATED:
            message = (
                f"Attribute '{attribute_key}' set to '{attribute_value}' for ID: {directory_id}"
            )
        else:
            message = (
                f"Created person with ID: {directory_id}; "
                f"attribute '{attribute_key}' set to '{attribute_value}'"
            )
        log.info("Record %s %s: %s", record_id, action, message)
        session.apply(
            record_id,
            partial(complete_processing, action=action, directory_id=directory_id, message=message),
        )

    async def _create_or_update(
        self, record: ImportRecord, attribute_key: str, attribute_value: str
    ) -> tuple[ProcessAction, DirectoryId]:
        # Always decide from a fresh lookup: a retry after a half-finished create
        # finds the person and takes the update path.
        existing = await self._directory.find_person(
            record.first_name, record.last_name, record.email
        )
        if existing is not None:
            await self._directory.set_attribute(existing.id, attribute_key, attribute_value)
            return ProcessAction.UPDATED, existing.id
        created = await self._directory.create_person(
            record.first_name,
            record.last_name,
            record.email,
            attribute_key,
            attribute_value,
        )
        return ProcessAction.CREATED, created.id

    async def _run_checks(self, session: ImportSession, batch: list[ImportRecord]) -> None:
        await asyncio.gather(*(self._check_one(session, record) for record in batch))

    async def _check_one(self, session: ImportSession, record: ImportRecord) -> None:
        try:
            person = await self._directory.find_person(
                record.first_name, record.last_name, record.email
            )
        except DirectoryError as exc:
            if self._discard_if_stale(session, record.id):
                return
            log.warning("Existence check failed for record %s: %s", record.id, exc)
            session.apply(record.id, partial(fail_check, message=str(exc)))
            return

        if self._discard_if_stale(session, record.id):
            return
        session.apply(record.id, partial(resolve_check, person=person))

    def _discard_if_stale(self, session: ImportSession, record_id: str) -> bool:
        if self.is_current(session):
            return False
        log.debug("Discarding stale response for record %s of session %s", record_id, session.id)
        return True

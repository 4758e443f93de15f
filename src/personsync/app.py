"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from personsync.adapters.directory import DirectoryClient
from personsync.config import get_directory_config, get_reconcile_config
from personsync.domain.driver import ReconciliationDriver
from personsync.domain.model import (
    ExistenceStatus,
    ProcessAction,
    ProcessingStatus,
    Succeeded,
)

if TYPE_CHECKING:
    from personsync.config import DirectoryConfig
    from personsync.domain.csv_import import HeaderNames
    from personsync.domain.model import ImportRecord
    from personsync.domain.ports.directory import DirectoryPort
    from personsync.domain.session import ImportSession

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileSummary:
    """Counts describing where a reconciliation run left its records."""

    total: int
    skipped_rows: int
    batches: int
    exists: int
    not_found: int
    check_error: int
    unchecked: int
    created: int
    updated: int
    processing_errors: int

    @classmethod
    def from_records(
        cls, records: tuple[ImportRecord, ...], *, skipped_rows: int, batches: int
    ) -> ReconcileSummary:
        existence = Counter(record.existence_status for record in records)
        actions = Counter(
            record.processing.action
            for record in records
            if isinstance(record.processing, Succeeded)
        )
        return cls(
            total=len(records),
            skipped_rows=skipped_rows,
            batches=batches,
            exists=existence[ExistenceStatus.EXISTS],
            not_found=existence[ExistenceStatus.NOT_FOUND],
            check_error=existence[ExistenceStatus.CHECK_ERROR],
            unchecked=existence[ExistenceStatus.IDLE] + existence[ExistenceStatus.CHECKING],
            created=actions[ProcessAction.CREATED],
            updated=actions[ProcessAction.UPDATED],
            processing_errors=sum(
                1 for record in records if record.processing_status is ProcessingStatus.ERROR
            ),
        )


def build_directory_client(config: DirectoryConfig | None = None) -> DirectoryClient:
    return DirectoryClient(config=config or get_directory_config())


async def reconcile_csv(
    text: str,
    *,
    directory: DirectoryPort,
    headers: HeaderNames | None = None,
    batch_size: int | None = None,
    max_batches: int | None = None,
    recheck_failed: bool = False,
    process: bool = False,
    attribute_key: str | None = None,
    attribute_value: str | None = None,
) -> ReconcileSummary:
    """Check every row of ``text`` against ``directory`` and optionally process them.

    Existence checks run one window at a time, exactly as a viewer scrolling to
    the end of the list would request them. ``max_batches`` stops early.
    """

    if process and (not attribute_key or not attribute_value):
        raise ValueError("Processing requires an attribute key and value")
    effective_batch_size = batch_size or get_reconcile_config().batch_size
    driver = ReconciliationDriver(directory, batch_size=effective_batch_size)
    session = driver.submit_file(text, headers)
    log.info(
        "Starting reconciliation: records=%s, batch_size=%s, max_batches=%s, process=%s",
        session.total,
        effective_batch_size,
        max_batches,
        process,
    )

    batches = 0
    while not session.checks_exhausted:
        if max_batches is not None and batches >= max_batches:
            log.info("Stopping after %s batch(es)", batches)
            break
        await driver.request_more_checks(session)
        batches += 1

    if recheck_failed:
        requeued = await driver.recheck_records(session)
        if requeued:
            log.info("Re-checked %s record(s) after failed existence checks", requeued)

    if process and attribute_key and attribute_value:
        await _process_all(driver, session, attribute_key, attribute_value)

    summary = ReconcileSummary.from_records(
        driver.get_records(session), skipped_rows=session.skipped_rows, batches=batches
    )
    log.info(
        "Finished reconciliation: exists=%s, not_found=%s, check_error=%s, unchecked=%s, "
        "created=%s, updated=%s, processing_errors=%s",
        summary.exists,
        summary.not_found,
        summary.check_error,
        summary.unchecked,
        summary.created,
        summary.updated,
        summary.processing_errors,
    )
    return summary


async def _process_all(
    driver: ReconciliationDriver,
    session: ImportSession,
    attribute_key: str,
    attribute_value: str,
) -> None:
    ready = [
        record.id
        for record in driver.get_records(session)
        if record.existence_status.is_known
        and record.processing_status in {ProcessingStatus.IDLE, ProcessingStatus.ERROR}
    ]
    log.info("Processing %s record(s)", len(ready))
    await asyncio.gather(
        *(
            driver.process_record(session, record_id, attribute_key, attribute_value)
            for record_id in ready
        )
    )


def run_reconciliation(
    text: str,
    *,
    directory: DirectoryPort | None = None,
    config: DirectoryConfig | None = None,
    headers: HeaderNames | None = None,
    batch_size: int | None = None,
    max_batches: int | None = None,
    recheck_failed: bool = False,
    process: bool = False,
    attribute_key: str | None = None,
    attribute_value: str | None = None,
) -> ReconcileSummary:
    """Synchronous entry point; builds a directory client from config when none is given."""

    async def run(port: DirectoryPort) -> ReconcileSummary:
        return await reconcile_csv(
            text,
            directory=port,
            headers=headers,
            batch_size=batch_size,
            max_batches=max_batches,
            recheck_failed=recheck_failed,
            process=process,
            attribute_key=attribute_key,
            attribute_value=attribute_value,
        )

    async def run_with_client() -> ReconcileSummary:
        async with build_directory_client(config) as client:
            return await run(client)

    if directory is not None:
        return asyncio.run(run(directory))
    return asyncio.run(run_with_client())

from __future__ import annotations

import asyncio

import pytest

from personsync.app import ReconcileSummary, reconcile_csv, run_reconciliation
from personsync.domain.csv_import import HeaderMismatch, HeaderNames
from tests.helpers.directory import FakeDirectory, make_csv

ADA = ("Ada", "Lovelace", "ada@x.com")
ALAN = ("Alan", "Turing", "alan@x.com")
GRACE = ("Grace", "Hopper", "grace@x.com")


def test_reconcile_checks_every_batch() -> None:
    directory = FakeDirectory()
    directory.add_person(*ADA)

    summary = asyncio.run(
        reconcile_csv(make_csv(ADA, ALAN, GRACE), directory=directory, batch_size=2)
    )

    assert summary == ReconcileSummary(
        total=3,
        skipped_rows=0,
        batches=2,
        exists=1,
        not_found=2,
        check_error=0,
        unchecked=0,
        created=0,
        updated=0,
        processing_errors=0,
    )
    assert len(directory.find_calls) == 3


def test_reconcile_stops_after_max_batches() -> None:
    directory = FakeDirectory()

    summary = asyncio.run(
        reconcile_csv(
            make_csv(ADA, ALAN, GRACE), directory=directory, batch_size=1, max_batches=2
        )
    )

    assert summary.batches == 2
    assert summary.not_found == 2
    assert summary.unchecked == 1


def test_reconcile_processes_and_rechecks() -> None:
    directory = FakeDirectory(failing_emails={GRACE[2]})
    directory.add_person(*ADA)

    summary = asyncio.run(
        reconcile_csv(
            make_csv(ADA, ALAN, GRACE),
            directory=directory,
            recheck_failed=True,
            process=True,
            attribute_key="Imported",
            attribute_value="yes",
        )
    )

    assert summary.exists == 2
    assert summary.check_error == 1
    assert summary.updated == 1
    assert summary.created == 1
    assert summary.processing_errors == 1
    assert directory.find_calls.count(GRACE) == 3


def test_reconcile_with_custom_headers() -> None:
    text = "Given,Family,Mail\nAda,Lovelace,ada@x.com\n"
    headers = HeaderNames(first_name="given", last_name="family", email="mail")

    summary = asyncio.run(reconcile_csv(text, directory=FakeDirectory(), headers=headers))

    assert summary.total == 1
    assert summary.not_found == 1


def test_reconcile_requires_attribute_for_processing() -> None:
    with pytest.raises(ValueError, match="attribute"):
        asyncio.run(reconcile_csv(make_csv(ADA), directory=FakeDirectory(), process=True))


def test_run_reconciliation_propagates_header_mismatch() -> None:
    with pytest.raises(HeaderMismatch):
        run_reconciliation("name\nAda\n", directory=FakeDirectory())


def test_run_reconciliation_uses_configured_batch_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERSONSYNC_BATCH_SIZE", "1")

    summary = run_reconciliation(make_csv(ADA, ALAN), directory=FakeDirectory())

    assert summary.batches == 2

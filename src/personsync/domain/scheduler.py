"""Demand-driven batch window over the record list."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .record_state import request_check

if TYPE_CHECKING:
    from collections.abc import MutableSequence, Sequence

    from .model import ImportRecord

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BatchSelection:
    """Records picked for one round, already moved into ``checking``."""

    records: tuple[ImportRecord, ...]
    positions: tuple[int, ...]
    processed_index: int


def next_batch(
    records: Sequence[ImportRecord], processed_index: int, batch_size: int
) -> BatchSelection:
    """Select unchecked records in ``[processed_index, processed_index + batch_size)``.

    The returned records are the ``checking`` successors of the originals; the
    caller stores them before issuing any request so that a concurrent signal
    cannot pick them again.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    total = len(records)
    start = min(max(processed_index, 0), total)
    end = min(start + batch_size, total)

    selected: list[ImportRecord] = []
    positions: list[int] = []
    for position in range(start, end):
        marked = request_check(records[position])
        if marked is None:
            continue
        selected.append(marked)
        positions.append(position)
    return BatchSelection(records=tuple(selected), positions=tuple(positions), processed_index=end)


class BatchScheduler:
    """Tracks how far existence checks have been initiated and hands out windows.

    The scheduler never advances on its own; each call to :meth:`take` is one
    demand signal.
    """

    def __init__(self, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._batch_size = batch_size
        self._processed_index = 0

    @property
    def processed_index(self) -> int:
        return self._processed_index

    def exhausted(self, total: int) -> bool:
        return self._processed_index >= total

    def take(self, records: MutableSequence[ImportRecord]) -> list[ImportRecord]:
        """Advance the window by one batch, marking its records in place."""

        if self.exhausted(len(records)):
            log.debug("Demand signal ignored: all %s records already initiated", len(records))
            return []

        selection = next_batch(records, self._processed_index, self._batch_size)
        for position, record in zip(selection.positions, selection.records, strict=True):
            records[position] = record
        log.debug(
            "Selected %s record(s) from window [%s, %s)",
            len(selection.records),
            self._processed_index,
            selection.processed_index,
        )
        self._processed_index = max(self._processed_index, selection.processed_index)
        return list(selection.records)

"""Import sessions: one parsed file and its reconciliation progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

from .model import ImportRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .model import RawRow
    from .scheduler import BatchScheduler

type Transition = Callable[[ImportRecord], ImportRecord | None]


def _new_session_id() -> str:
    return uuid4().hex[:12]


@dataclass(slots=True, eq=False)
class ImportSession:
    """Owns the records of one import together with the batch window.

    Records are immutable; the session swaps in successor records produced by
    the transition functions and nothing else writes to ``_records``.
    """

    generation: int
    scheduler: BatchScheduler
    skipped_rows: int = 0
    id: str = field(default_factory=_new_session_id)
    _records: list[ImportRecord] = field(default_factory=list[ImportRecord])
    _positions: dict[str, int] = field(default_factory=dict[str, int])

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[RawRow],
        *,
        generation: int,
        scheduler: BatchScheduler,
        skipped_rows: int = 0,
    ) -> ImportSession:
        session = cls(generation=generation, scheduler=scheduler, skipped_rows=skipped_rows)
        for row in rows:
            record = ImportRecord(
                id=f"{session.id}-{row.position}",
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
            )
            session._positions[record.id] = len(session._records)
            session._records.append(record)
        return session

    @property
    def records(self) -> tuple[ImportRecord, ...]:
        return tuple(self._records)

    @property
    def total(self) -> int:
        return len(self._records)

    @property
    def processed_index(self) -> int:
        return self.scheduler.processed_index

    @property
    def checks_exhausted(self) -> bool:
        return self.scheduler.exhausted(self.total)

    @property
    def checked_count(self) -> int:
        return sum(1 for record in self._records if record.existence_status.is_known)

    def get(self, record_id: str) -> ImportRecord | None:
        position = self._positions.get(record_id)
        if position is None:
            return None
        return self._records[position]

    def take_batch(self) -> list[ImportRecord]:
        return self.scheduler.take(self._records)

    def apply(self, record_id: str, transition: Transition) -> ImportRecord | None:
        """Run ``transition`` on the current version of a record and store the result."""

        position = self._positions.get(record_id)
        if position is None:
            return None
        updated = transition(self._records[position])
        if updated is not None:
            self._records[position] = updated
        return updated

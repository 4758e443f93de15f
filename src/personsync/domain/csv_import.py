"""Parsing of operator supplied CSV text into typed rows.

The accepted dialect is deliberately small: rows are split on bare commas (no
quoted-comma support) and each cell loses surrounding whitespace plus one pair of
wrapping double quotes. Rows lacking a first name, last name or email are
dropped without being reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .model import RawRow

if TYPE_CHECKING:
    from collections.abc import Sequence

_LINE_BREAK = re.compile(r"\r?\n")


class HeaderMismatch(ValueError):
    """Raised when one or more required headers are absent from the header row."""

    def __init__(self, missing: Sequence[str], available: Sequence[str]) -> None:
        self.missing = tuple(missing)
        self.available = tuple(available)
        missing_list = "', '".join(self.missing)
        super().__init__(
            f"CSV header(s) not found: '{missing_list}'. "
            f"Available headers: {', '.join(self.available)}"
        )


@dataclass(frozen=True, slots=True)
class HeaderNames:
    """Column headers holding the first name, last name and email."""

    first_name: str = "first_name"
    last_name: str = "last_name"
    email: str = "email"

    def __post_init__(self) -> None:
        for label, value in (
            ("first name", self.first_name),
            ("last name", self.last_name),
            ("email", self.email),
        ):
            if not value.strip():
                raise ValueError(f"CSV header name for {label} must not be blank")

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.first_name.strip(), self.last_name.strip(), self.email.strip())


DEFAULT_HEADERS = HeaderNames()


def parse_csv(text: str, headers: HeaderNames | None = None) -> list[RawRow]:
    """Parse ``text`` into rows, in file order.

    ``headers`` falls back to :data:`DEFAULT_HEADERS` only when omitted entirely.
    Raises :class:`HeaderMismatch` naming every required header that is missing.
    """

    first_header, last_header, email_header = (headers or DEFAULT_HEADERS).as_tuple()

    lines = _LINE_BREAK.split(text.strip())
    if len(lines) < 2:
        return []

    available = [cell.strip() for cell in lines[0].split(",")]
    lowered = [cell.lower() for cell in available]

    indexes: list[int] = []
    missing: list[str] = []
    for header in (first_header, last_header, email_header):
        try:
            indexes.append(lowered.index(header.lower()))
        except ValueError:
            missing.append(header)
    if missing:
        raise HeaderMismatch(missing, available)

    first_index, last_index, email_index = indexes
    rows: list[RawRow] = []
    for position, line in enumerate(lines[1:]):
        cells = [_clean_cell(cell) for cell in line.split(",")]
        first_name = _cell_at(cells, first_index)
        last_name = _cell_at(cells, last_index)
        email = _cell_at(cells, email_index)
        if not (first_name and last_name and email):
            continue
        rows.append(
            RawRow(position=position, first_name=first_name, last_name=last_name, email=email)
        )
    return rows


def count_data_lines(text: str) -> int:
    """Number of lines after the header row, as seen by :func:`parse_csv`."""

    return max(len(_LINE_BREAK.split(text.strip())) - 1, 0)


def _clean_cell(cell: str) -> str:
    value = cell.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1].strip()
    return value


def _cell_at(cells: list[str], index: int) -> str:
    return cells[index] if index < len(cells) else ""

"""Port for the external person directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

type DirectoryId = int


class DirectoryError(RuntimeError):
    """A directory operation failed.

    ``status`` is the HTTP status of the failed response, or ``None`` when the
    request never produced one (timeouts, connection errors).
    """

    def __init__(self, operation: str, *, status: int | None, body: str) -> None:
        self.operation = operation
        self.status = status
        self.body = body
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.status is None:
            return f"Directory API error ({self.operation}): {self.body}"
        if not self.body:
            return f"Directory API error ({self.operation}): {self.status}"
        return f"Directory API error ({self.operation}): {self.status} - {self.body}"


@dataclass(frozen=True, slots=True)
class DirectoryPerson:
    """Canonical person record as held by the directory."""

    id: DirectoryId
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


@runtime_checkable
class DirectoryPort(Protocol):
    """The three operations the reconciliation engine needs from a directory."""

    async def find_person(
        self, first_name: str, last_name: str, email: str
    ) -> DirectoryPerson | None:
        """Return the first person matching all three fields, or ``None``."""
        ...

    async def create_person(
        self,
        first_name: str,
        last_name: str,
        email: str,
        attribute_key: str,
        attribute_value: str,
    ) -> DirectoryPerson:
        """Create a person, set the attribute and return the canonical record."""
        ...

    async def set_attribute(
        self, person_id: DirectoryId, attribute_key: str, attribute_value: str
    ) -> None:
        """Set an attribute on an existing person. Safe to repeat."""
        ...

"""Translate directory payloads into domain values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from personsync.domain.ports.directory import DirectoryPerson

if TYPE_CHECKING:
    from .schema import PersonPayload


def translate_person(payload: PersonPayload) -> DirectoryPerson:
    return DirectoryPerson(
        id=payload.id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
    )


def escape_filter_value(value: str) -> str:
    return value.replace("'", "''")


def build_person_filter(first_name: str, last_name: str, email: str) -> str:
    """Filter expression requiring email, first name and last name to all match."""

    return (
        f"(Email eq '{escape_filter_value(email)}') and "
        f"(FirstName eq '{escape_filter_value(first_name)}') and "
        f"(LastName eq '{escape_filter_value(last_name)}')"
    )

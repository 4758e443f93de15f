from __future__ import annotations

import pytest

from personsync.adapters.directory import (
    CreatePersonRequest,
    PersonPayload,
    build_person_filter,
    parse_created_id,
    translate_person,
)
from personsync.domain.ports.directory import DirectoryPerson


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ("42", 42),
        (" 42\n", 42),
        ('{"Id": 7, "Guid": "abc"}', 7),
        ('{"id": 8}', 8),
        ("", None),
        ('"created"', None),
        ("true", None),
        ('"42"', None),
        ('{"Status": "ok"}', None),
        ("<html>", None),
    ],
)
def test_parse_created_id(body: str, expected: int | None) -> None:
    assert parse_created_id(body) == expected


def test_create_request_carries_import_defaults() -> None:
    body = CreatePersonRequest.for_import("Ada", "Lovelace", "ada@x.com").model_dump(
        by_alias=True
    )

    assert body == {
        "FirstName": "Ada",
        "LastName": "Lovelace",
        "NickName": "Ada",
        "Email": "ada@x.com",
        "Gender": 0,
        "IsDeceased": False,
        "EmailPreference": 0,
        "RecordTypeValueId": 1,
        "CommunicationPreference": 1,
        "AgeClassification": 0,
        "IsLockedAsChild": False,
        "AccountProtectionProfile": 0,
        "IsSystem": False,
    }


def test_person_payload_ignores_unknown_fields() -> None:
    payload = PersonPayload.model_validate(
        {
            "Id": 3,
            "FirstName": "Grace",
            "LastName": "Hopper",
            "Email": None,
            "PhotoUrl": "/photo.jpg",
            "AttributeValues": {"Imported": {"Value": "yes"}},
        }
    )

    assert translate_person(payload) == DirectoryPerson(
        id=3, first_name="Grace", last_name="Hopper", email=None
    )
    assert payload.attribute_values is not None
    assert payload.attribute_values["Imported"].value == "yes"


def test_filter_escapes_single_quotes() -> None:
    assert build_person_filter("D'Arcy", "Smith", "o'hara@x.com") == (
        "(Email eq 'o''hara@x.com') and (FirstName eq 'D''Arcy') and (LastName eq 'Smith')"
    )

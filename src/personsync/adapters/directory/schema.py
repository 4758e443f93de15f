"""Pydantic models describing the directory API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError


class DirectoryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AttributeValuePayload(DirectoryBaseModel):
    value: str | int | float | bool | None = Field(default=None, alias="Value")


class PersonPayload(DirectoryBaseModel):
    id: int = Field(alias="Id")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")
    email: str | None = Field(default=None, alias="Email")
    attribute_values: dict[str, AttributeValuePayload] | None = Field(
        default=None, alias="AttributeValues"
    )


PersonListAdapter = TypeAdapter(list[PersonPayload])


class CreatePersonRequest(DirectoryBaseModel):
    """Body of ``POST People`` with the flags every imported person starts with."""

    first_name: str = Field(alias="FirstName")
    last_name: str = Field(alias="LastName")
    nick_name: str = Field(alias="NickName")
    email: str = Field(alias="Email")
    gender: int = Field(default=0, alias="Gender")
    is_deceased: bool = Field(default=False, alias="IsDeceased")
    email_preference: int = Field(default=0, alias="EmailPreference")
    record_type_value_id: int = Field(default=1, alias="RecordTypeValueId")
    communication_preference: int = Field(default=1, alias="CommunicationPreference")
    age_classification: int = Field(default=0, alias="AgeClassification")
    is_locked_as_child: bool = Field(default=False, alias="IsLockedAsChild")
    account_protection_profile: int = Field(default=0, alias="AccountProtectionProfile")
    is_system: bool = Field(default=False, alias="IsSystem")

    @classmethod
    def for_import(cls, first_name: str, last_name: str, email: str) -> CreatePersonRequest:
        return cls(first_name=first_name, last_name=last_name, nick_name=first_name, email=email)


class CreatedIdPayload(DirectoryBaseModel):
    upper_id: int | None = Field(default=None, alias="Id")
    lower_id: int | None = Field(default=None, alias="id")

    @property
    def resolved(self) -> int | None:
        return self.upper_id if self.upper_id is not None else self.lower_id


CreatedIdAdapter = TypeAdapter(StrictInt | CreatedIdPayload)


def parse_created_id(body: str) -> int | None:
    """Extract the new person id from a create response.

    The service answers either with a bare number or with a JSON object holding
    ``Id``. Returns ``None`` when neither form is present.
    """

    try:
        created = CreatedIdAdapter.validate_json(body)
    except ValidationError:
        return None
    if isinstance(created, CreatedIdPayload):
        return created.resolved
    return created

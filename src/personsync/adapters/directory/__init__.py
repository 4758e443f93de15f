"""Public interface for the directory adapter."""

from __future__ import annotations

from .client import DirectoryClient
from .schema import CreatePersonRequest, PersonPayload, parse_created_id
from .translator import build_person_filter, translate_person

__all__ = [
    "CreatePersonRequest",
    "DirectoryClient",
    "PersonPayload",
    "build_person_filter",
    "parse_created_id",
    "translate_person",
]

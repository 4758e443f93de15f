"""Domain ports."""

from __future__ import annotations

from .directory import DirectoryError, DirectoryId, DirectoryPerson, DirectoryPort

__all__ = ["DirectoryError", "DirectoryId", "DirectoryPerson", "DirectoryPort"]

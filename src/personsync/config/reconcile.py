"""Reconciliation defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_number_env_var

DEFAULT_BATCH_SIZE = 50


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    batch_size: int = DEFAULT_BATCH_SIZE


def get_reconcile_config() -> ReconcileConfig:
    return ReconcileConfig(
        batch_size=positive_number_env_var(
            "PERSONSYNC_BATCH_SIZE", default=DEFAULT_BATCH_SIZE, kind=int
        )
    )

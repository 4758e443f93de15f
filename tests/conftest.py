from __future__ import annotations

import pytest

DIRECTORY_ENV_VARS = (
    "DIRECTORY_API_URL",
    "DIRECTORY_API_KEY",
    "DIRECTORY_ATTRIBUTE_KEY",
    "DIRECTORY_ATTRIBUTE_VALUE",
    "DIRECTORY_TIMEOUT_SECONDS",
    "DIRECTORY_MAX_CALLS_PER_SECOND",
    "PERSONSYNC_BATCH_SIZE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so monkeypatch also undoes values a test loads from a .env file
    for name in DIRECTORY_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def directory_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DIRECTORY_API_URL", "https://directory.test/api/")
    monkeypatch.setenv("DIRECTORY_API_KEY", "secret-token")

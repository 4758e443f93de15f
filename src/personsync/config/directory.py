"""Directory service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, positive_number_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DIRECTORY_TIMEOUT_SECONDS = 30.0
DIRECTORY_MAX_CALLS_PER_SECOND = 10
AUTH_HEADER = "Authorization-Token"


@dataclass(frozen=True, slots=True)
class DirectoryConfig:
    """Holds directory API configuration values."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig
    attribute_key: str | None = None
    attribute_value: str | None = None

    def __repr__(self) -> str:
        return (
            f"DirectoryConfig(base_url={self.base_url!r}, api_key='***', "
            f"attribute_key={self.attribute_key!r}, attribute_value={self.attribute_value!r})"
        )


def build_directory_resilience(
    *,
    base_url: str,
    api_key: str,
    timeout_seconds: float = DIRECTORY_TIMEOUT_SECONDS,
    max_calls_per_second: int = DIRECTORY_MAX_CALLS_PER_SECOND,
    retry: RetryPolicy | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="directory",
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        retry=retry or RetryPolicy(),
        ratelimit=RateLimit(max_calls=max_calls_per_second, per_seconds=1.0),
        default_headers={AUTH_HEADER: api_key, "Accept": "application/json"},
    )


def get_directory_config(*, resilience: ResilienceConfig | None = None) -> DirectoryConfig:
    values = require_env_vars(("DIRECTORY_API_URL", "DIRECTORY_API_KEY"))
    base_url = values["DIRECTORY_API_URL"]
    api_key = values["DIRECTORY_API_KEY"]
    return DirectoryConfig(
        base_url=base_url,
        api_key=api_key,
        attribute_key=optional_env_var("DIRECTORY_ATTRIBUTE_KEY"),
        attribute_value=optional_env_var("DIRECTORY_ATTRIBUTE_VALUE"),
        resilience=resilience
        or build_directory_resilience(
            base_url=base_url,
            api_key=api_key,
            timeout_seconds=positive_number_env_var(
                "DIRECTORY_TIMEOUT_SECONDS", default=DIRECTORY_TIMEOUT_SECONDS, kind=float
            ),
            max_calls_per_second=positive_number_env_var(
                "DIRECTORY_MAX_CALLS_PER_SECOND",
                default=DIRECTORY_MAX_CALLS_PER_SECOND,
                kind=int,
            ),
        ),
    )

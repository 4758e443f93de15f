"""Application configuration helpers."""

from __future__ import annotations

from .directory import DirectoryConfig, build_directory_resilience, get_directory_config
from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconcile import DEFAULT_BATCH_SIZE, ReconcileConfig, get_reconcile_config

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "ConfigurationError",
    "DirectoryConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "build_directory_resilience",
    "configure_logging",
    "get_directory_config",
    "get_reconcile_config",
    "optional_env_var",
    "require_env_vars",
]

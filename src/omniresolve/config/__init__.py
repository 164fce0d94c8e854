"""Application configuration helpers."""

from __future__ import annotations

from .api import ApiConfig, get_api_config
from .cache import CacheConfig, get_cache_config
from .env import (
    env_bool,
    env_float,
    env_int,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import (
    ConfigurationError,
    InvalidConfigurationValueError,
    MissingConfigurationError,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .omnichannel import OmnichannelConfig, get_omnichannel_config
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ApiConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationValueError",
    "MissingConfigurationError",
    "OmnichannelConfig",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "get_api_config",
    "get_cache_config",
    "get_database_config",
    "get_omnichannel_config",
    "get_reconciliation_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]

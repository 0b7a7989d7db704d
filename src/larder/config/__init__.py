"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, positive_int_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .remote import RemoteConfig, get_config_path, get_remote_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "RemoteConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "get_config_path",
    "get_remote_config",
    "optional_env_var",
    "positive_int_env_var",
]

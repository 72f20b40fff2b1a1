"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .graph import (
    GraphConfig,
    GraphCredentials,
    SharePointConfig,
    get_graph_config,
    get_sharepoint_config,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ConfigurationError",
    "GraphConfig",
    "GraphCredentials",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SharePointConfig",
    "SyncConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_graph_config",
    "get_sharepoint_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
]

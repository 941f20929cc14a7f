"""Configuration module for the docs corpus builder and query server.

Provides layered YAML configuration with environment overrides.
"""

from .settings import (
    DEFAULT_CONFIG,
    DocsConfig,
    load_config,
    load_config_dict
)

__all__ = [
    'DEFAULT_CONFIG',
    'DocsConfig',
    'load_config',
    'load_config_dict'
]

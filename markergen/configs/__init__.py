"""Configuration management for markergen.

This module provides YAML-based configuration with dot notation access
and inheritance support.

Example:
    >>> from markergen.configs import load_config
    >>> config = load_config("markers.yaml")
    >>> print(config.minsize)
"""

from .config import (
    Config,
    ConfigDict,
    get_default_config,
    load_config,
    merge_config,
    parse_overrides,
)

__all__ = [
    "Config",
    "ConfigDict",
    "load_config",
    "merge_config",
    "parse_overrides",
    "get_default_config",
]

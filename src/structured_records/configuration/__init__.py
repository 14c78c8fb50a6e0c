"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import DEFAULT_DELIMITER, ConfigurationError, load_configuration
from .runtime_settings import Configuration, DelimitedSettings, JsonSettings, SchemaConfig

__all__ = [
    "Configuration",
    "DelimitedSettings",
    "JsonSettings",
    "SchemaConfig",
    "ConfigurationError",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_DELIMITER",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]

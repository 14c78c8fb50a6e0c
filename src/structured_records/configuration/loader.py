"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from structured_records.errors import SchemaDefinitionError
from structured_records.json_codec import DEFAULT_MAX_DEPTH
from structured_records.schema_model import SchemaType, parse_schema

from .runtime_settings import Configuration, DelimitedSettings, JsonSettings, SchemaConfig

DEFAULT_DELIMITER = ","


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return Configuration(
        path=path,
        schema=_parse_schema_section(parsed.get("schema"), path.parent),
        json=_parse_json_section(parsed.get("json")),
        delimited=_parse_delimited_section(parsed.get("delimited")),
    )


def _parse_schema_section(value: Any, base_path: Path) -> SchemaConfig:
    section = _require_mapping(value, "schema")
    text, source_path = _load_schema_definition(section, base_path)
    if not text.strip():
        raise ConfigurationError("Schema text cannot be empty.")
    try:
        schema = parse_schema(text)
    except SchemaDefinitionError as exc:
        raise ConfigurationError(str(exc)) from exc
    if schema.schema_type is not SchemaType.RECORD:
        raise ConfigurationError("Schema root must be a record.")
    return SchemaConfig(text=text, source_path=source_path, schema=schema)


def _load_schema_definition(mapping: Mapping[str, Any], base_path: Path) -> tuple[str, Path | None]:
    inline = mapping.get("inline")
    path_value = mapping.get("path")
    if inline and path_value:
        raise ConfigurationError("Schema definition must not set both inline and path.")
    if inline:
        if not isinstance(inline, str):
            raise ConfigurationError("Schema inline value must be a string.")
        return inline, None
    if path_value:
        if not isinstance(path_value, str):
            raise ConfigurationError("Schema path must be a string.")
        schema_path = _resolve_path(base_path, path_value)
        if not schema_path.exists():
            raise ConfigurationError(f"Schema file not found: {schema_path}")
        return schema_path.read_text(encoding="utf-8"), schema_path
    raise ConfigurationError("Schema definition requires either inline or path.")


def _parse_json_section(value: Any) -> JsonSettings:
    section = _optional_mapping(value, "json")
    lenient = _require_bool(section.get("lenient", False), "json.lenient")
    max_depth = _require_positive_int(section.get("max_depth", DEFAULT_MAX_DEPTH), "json.max_depth")
    return JsonSettings(lenient=lenient, max_depth=max_depth)


def _parse_delimited_section(value: Any) -> DelimitedSettings:
    section = _optional_mapping(value, "delimited")
    delimiter = section.get("delimiter", DEFAULT_DELIMITER)
    if not isinstance(delimiter, str):
        raise ConfigurationError("delimited.delimiter must be a string.")
    if not delimiter:
        raise ConfigurationError("delimited.delimiter must not be empty.")
    return DelimitedSettings(delimiter=delimiter)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value

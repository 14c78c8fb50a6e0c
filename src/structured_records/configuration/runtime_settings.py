"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from structured_records.schema_model import Schema


@dataclass(frozen=True)
class SchemaConfig:
    """Schema text as configured, with its parsed form."""

    text: str
    source_path: Path | None
    schema: Schema


@dataclass(frozen=True)
class JsonSettings:
    """JSON codec options."""

    lenient: bool
    max_depth: int


@dataclass(frozen=True)
class DelimitedSettings:
    """Delimited codec options."""

    delimiter: str


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    schema: SchemaConfig
    json: JsonSettings
    delimited: DelimitedSettings

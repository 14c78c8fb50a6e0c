"""Schema model exports."""

from .schema_json import parse_schema, schema_from_document, schema_to_document, schema_to_json
from .schema_types import (
    INTEGER_BOUNDS,
    Field,
    Schema,
    SchemaType,
    ensure_references_resolve,
    resolve_record,
)

__all__ = [
    "INTEGER_BOUNDS",
    "Field",
    "Schema",
    "SchemaType",
    "ensure_references_resolve",
    "resolve_record",
    "parse_schema",
    "schema_from_document",
    "schema_to_document",
    "schema_to_json",
]

"""Flat delimited-line encoding of structured records."""

from __future__ import annotations

from structured_records.errors import (
    FieldCountMismatchError,
    MissingFieldError,
    UnsupportedShapeError,
)
from structured_records.record_model import StructuredRecord, StructuredRecordBuilder, format_text
from structured_records.schema_model import Schema, SchemaType


def ensure_flat_schema(schema: Schema) -> None:
    """Raise UnsupportedShapeError unless every field is simple or nullable simple."""
    if schema.schema_type is not SchemaType.RECORD or schema.is_reference:
        raise UnsupportedShapeError("Delimited records require a record schema definition.")
    for field in schema.fields or ():
        if not field.schema.is_simple_or_nullable_simple():
            raise UnsupportedShapeError(
                f"Field '{field.name}' of type {field.schema.non_nullable().schema_type.value} "
                "cannot be represented in a delimited line."
            )


def encode_delimited(record: StructuredRecord, delimiter: str) -> str:
    """Join the text form of each field value in schema order; null becomes empty."""
    _require_delimiter(delimiter)
    schema = record.schema
    ensure_flat_schema(schema)
    return delimiter.join(
        format_text(field.schema.non_nullable(), record.get(field.name))
        for field in schema.fields or ()
    )


def decode_delimited(line: str, delimiter: str, schema: Schema) -> StructuredRecord:
    """Split ``line`` on the literal delimiter and coerce one token per field.

    A field value that contains the delimiter cannot be decoded correctly; no
    quoting or escaping is applied.
    """
    _require_delimiter(delimiter)
    ensure_flat_schema(schema)
    fields = schema.fields or ()
    tokens = line.split(delimiter)
    if len(tokens) != len(fields):
        raise FieldCountMismatchError(
            f"Expected {len(fields)} fields for record '{schema.record_name}' "
            f"but found {len(tokens)}."
        )
    builder = StructuredRecordBuilder(schema)
    for field, token in zip(fields, tokens, strict=True):
        if token:
            builder.convert_and_set(field.name, token)
        elif field.schema.accepts_null:
            builder.set(field.name, None)
        else:
            raise MissingFieldError(f"Field '{field.name}' is empty but not nullable.")
    return builder.build()


def _require_delimiter(delimiter: str) -> None:
    if not isinstance(delimiter, str) or not delimiter:
        raise ValueError("Delimiter must be a non-empty string.")

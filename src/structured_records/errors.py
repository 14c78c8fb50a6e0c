"""Error taxonomy shared by the schema, record and codec layers."""

from __future__ import annotations


class RecordCodecError(Exception):
    """Base class for all schema, record and codec failures."""


class SchemaDefinitionError(RecordCodecError):
    """Raised for malformed schema construction (duplicate fields, empty union, ...)."""


class UnsupportedTypeError(RecordCodecError):
    """Raised when a native type has no schema mapping."""


class CoercionError(RecordCodecError):
    """Raised when a value cannot be converted to the target primitive."""


class MissingFieldError(RecordCodecError):
    """Raised when a non-nullable field has no value."""


class SchemaMismatchError(RecordCodecError):
    """Raised when input structure disagrees with the schema shape."""


class FieldCountMismatchError(RecordCodecError):
    """Raised when a delimited line has a different token count than the schema fields."""


class UnsupportedShapeError(RecordCodecError):
    """Raised when the delimited codec is given a non-flat schema."""


class StreamError(RecordCodecError):
    """Raised for malformed or truncated token streams."""


class FormatError(RecordCodecError):
    """Raised when a record value cannot be written in the wire format."""

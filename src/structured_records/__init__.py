"""Schema-driven structured records with JSON and delimited codecs."""

import logging

from .conversion import (
    from_delimited,
    from_json,
    read_delimited_records,
    read_json_records,
    to_delimited,
    to_json,
    write_delimited_records,
    write_json_records,
)
from .errors import (
    CoercionError,
    FieldCountMismatchError,
    FormatError,
    MissingFieldError,
    RecordCodecError,
    SchemaDefinitionError,
    SchemaMismatchError,
    StreamError,
    UnsupportedShapeError,
    UnsupportedTypeError,
)
from .record_model import StructuredRecord, StructuredRecordBuilder
from .schema_generation import SchemaGenerator, generate_schema
from .schema_model import Field, Schema, SchemaType, parse_schema, schema_to_json

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CoercionError",
    "Field",
    "FieldCountMismatchError",
    "FormatError",
    "MissingFieldError",
    "RecordCodecError",
    "Schema",
    "SchemaDefinitionError",
    "SchemaGenerator",
    "SchemaMismatchError",
    "SchemaType",
    "StreamError",
    "StructuredRecord",
    "StructuredRecordBuilder",
    "UnsupportedShapeError",
    "UnsupportedTypeError",
    "from_delimited",
    "from_json",
    "generate_schema",
    "parse_schema",
    "read_delimited_records",
    "read_json_records",
    "schema_to_json",
    "to_delimited",
    "to_json",
    "write_delimited_records",
    "write_json_records",
]

"""Structured record exports."""

from .structured_record import StructuredRecord, StructuredRecordBuilder, coerce_value, conforms_to
from .value_coercion import (
    FLOAT32_MAX,
    check_integer,
    coerce_number_literal,
    coerce_primitive,
    format_text,
    parse_text,
)

__all__ = [
    "FLOAT32_MAX",
    "StructuredRecord",
    "StructuredRecordBuilder",
    "check_integer",
    "coerce_number_literal",
    "coerce_primitive",
    "coerce_value",
    "conforms_to",
    "format_text",
    "parse_text",
]

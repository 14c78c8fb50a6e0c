"""Scalar coercion rules shared by the record builder and both codecs."""

from __future__ import annotations

import base64
import binascii
import math
import re
from decimal import Decimal, InvalidOperation

from structured_records.errors import CoercionError
from structured_records.schema_model import INTEGER_BOUNDS, Schema, SchemaType

FLOAT32_MAX = 3.4028234663852886e38

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")
_FLOAT_TEXT = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_NON_FINITE_TEXT = re.compile(r"[+-]?(?:nan|inf|infinity)", re.IGNORECASE)


def check_integer(schema_type: SchemaType, value: int, path: str) -> int:
    """Return ``value`` if it fits the integer width of ``schema_type``."""
    lower, upper = INTEGER_BOUNDS[schema_type]
    if not lower <= value <= upper:
        raise CoercionError(
            f"{path}: value {value} does not fit {schema_type.value} range [{lower}, {upper}]."
        )
    return value


def check_float(schema_type: SchemaType, value: float, path: str) -> float:
    """Return ``value`` if a finite value fits the float width of ``schema_type``."""
    if schema_type is SchemaType.FLOAT and math.isfinite(value) and abs(value) > FLOAT32_MAX:
        raise CoercionError(f"{path}: value {value} does not fit float range.")
    return value


def coerce_primitive(schema_type: SchemaType, value: object, path: str) -> object:
    """Validate and normalize a native Python value for a simple, non-null schema type."""
    if schema_type is SchemaType.BOOLEAN:
        if isinstance(value, bool):
            return value
    elif schema_type.is_integer:
        if isinstance(value, int) and not isinstance(value, bool):
            return check_integer(schema_type, value, path)
    elif schema_type.is_floating:
        if isinstance(value, int | float) and not isinstance(value, bool):
            try:
                number = float(value)
            except OverflowError as exc:
                raise CoercionError(
                    f"{path}: value {value} does not fit {schema_type.value} range."
                ) from exc
            return check_float(schema_type, number, path)
    elif schema_type is SchemaType.STRING:
        if isinstance(value, str):
            return value
    elif schema_type is SchemaType.BYTES:
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value)
    raise CoercionError(
        f"{path}: {type(value).__name__} value is not compatible with {schema_type.value}."
    )


def coerce_number_literal(schema_type: SchemaType, literal: str, path: str) -> int | float:
    """Convert a JSON number literal to the target numeric width."""
    if schema_type.is_integer:
        try:
            number = Decimal(literal)
        except InvalidOperation as exc:
            raise CoercionError(f"{path}: '{literal}' is not a number.") from exc
        if not number.is_finite() or number != number.to_integral_value():
            raise CoercionError(f"{path}: '{literal}' is not an integer.")
        lower, upper = INTEGER_BOUNDS[schema_type]
        if not lower <= number <= upper:
            raise CoercionError(
                f"{path}: value {literal} does not fit {schema_type.value} "
                f"range [{lower}, {upper}]."
            )
        return int(number)
    if schema_type.is_floating:
        try:
            value = float(literal)
        except ValueError as exc:
            raise CoercionError(f"{path}: '{literal}' is not a number.") from exc
        if not math.isfinite(value):
            raise CoercionError(f"{path}: '{literal}' does not fit {schema_type.value} range.")
        return check_float(schema_type, value, path)
    raise CoercionError(f"{path}: number is not compatible with {schema_type.value}.")


def parse_text(schema: Schema, text: str, path: str) -> object:
    """Coerce a non-empty text token into the value of a simple (or enum) schema."""
    schema_type = schema.schema_type
    if schema_type is SchemaType.STRING:
        return text
    if schema_type is SchemaType.BOOLEAN:
        lowered = text.lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    elif schema_type.is_integer:
        if _INTEGER_TEXT.fullmatch(text):
            try:
                number = int(text)
            except ValueError as exc:
                raise CoercionError(f"{path}: '{text[:32]}...' has too many digits.") from exc
            return check_integer(schema_type, number, path)
    elif schema_type.is_floating:
        if _FLOAT_TEXT.fullmatch(text):
            value = float(text)
            if not math.isfinite(value):
                raise CoercionError(f"{path}: '{text}' does not fit {schema_type.value} range.")
            return check_float(schema_type, value, path)
        if _NON_FINITE_TEXT.fullmatch(text):
            return float(text)
    elif schema_type is SchemaType.BYTES:
        try:
            return base64.b64decode(text, validate=True)
        except binascii.Error as exc:
            raise CoercionError(f"{path}: '{text}' is not valid base64.") from exc
    elif schema_type is SchemaType.ENUM:
        if schema.enum_index(text) is not None:
            return text
        raise CoercionError(f"{path}: '{text}' is not a symbol of {list(schema.symbols or ())}.")
    else:
        raise CoercionError(f"{path}: {schema_type.value} values cannot be read from text.")
    raise CoercionError(f"{path}: '{text}' cannot be converted to {schema_type.value}.")


def format_text(schema: Schema, value: object) -> str:
    """Canonical text form of a simple (or enum) value; null becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int | str):
        return str(value)
    raise CoercionError(
        f"{type(value).__name__} value has no text form for {schema.schema_type.value}."
    )

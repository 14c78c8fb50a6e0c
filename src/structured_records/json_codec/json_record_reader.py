"""Schema-guided, streaming JSON decoder for structured records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TextIO

from structured_records.errors import CoercionError, SchemaMismatchError
from structured_records.record_model import (
    StructuredRecord,
    StructuredRecordBuilder,
    coerce_number_literal,
    parse_text,
)
from structured_records.schema_model import Schema, SchemaType, resolve_record

from .json_tokens import DEFAULT_MAX_DEPTH, JsonToken, JsonTokenReader

logger = logging.getLogger(__name__)

_SCALAR_TOKENS = frozenset({JsonToken.STRING, JsonToken.NUMBER, JsonToken.BOOLEAN})


class JsonRecordReader:
    """Decodes JSON into records by walking the schema in lock-step with the tokens.

    A strict reader rejects object keys that are not schema fields; a lenient reader
    discards them and also accepts a bare ``null`` for tagged unions with a null member.
    """

    def __init__(self, *, lenient: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._lenient = lenient
        self._max_depth = max_depth

    @property
    def lenient(self) -> bool:
        return self._lenient

    def read(self, source: TextIO | str, schema: Schema) -> StructuredRecord:
        """Decode exactly one JSON object from ``source`` into a record of ``schema``."""
        if schema.schema_type is not SchemaType.RECORD or schema.is_reference:
            raise SchemaMismatchError("JSON decoding requires a record schema definition.")
        tokens = JsonTokenReader(source, max_depth=self._max_depth)
        record = self._read_record(tokens, schema, schema.named_records, "")
        tokens.expect_end()
        return record

    def _read_value(
        self, tokens: JsonTokenReader, schema: Schema, registry: Mapping[str, Schema], path: str
    ) -> Any:
        kind = schema.schema_type
        if kind is SchemaType.UNION:
            return self._read_union(tokens, schema, registry, path)
        token = tokens.peek()
        if kind is SchemaType.NULL:
            if token is not JsonToken.NULL:
                raise _mismatch(schema, token, path)
            tokens.next_null()
            return None
        if token is JsonToken.NULL:
            raise CoercionError(f"{path}: null is not allowed for non-nullable {kind.value}.")
        if kind is SchemaType.BOOLEAN:
            if token is not JsonToken.BOOLEAN:
                raise _mismatch(schema, token, path)
            return tokens.next_boolean()
        if kind.is_integer or kind.is_floating:
            if token is not JsonToken.NUMBER:
                raise _mismatch(schema, token, path)
            return coerce_number_literal(kind, tokens.next_number(), path)
        if kind in (SchemaType.STRING, SchemaType.ENUM):
            if token is not JsonToken.STRING:
                raise _mismatch(schema, token, path)
            text = tokens.next_string()
            if kind is SchemaType.ENUM and schema.enum_index(text) is None:
                raise CoercionError(
                    f"{path}: '{text}' is not a symbol of {list(schema.symbols or ())}."
                )
            return text
        if kind is SchemaType.BYTES:
            return self._read_bytes(tokens, path)
        if kind is SchemaType.ARRAY:
            assert schema.items is not None
            if token is not JsonToken.BEGIN_ARRAY:
                raise _mismatch(schema, token, path)
            tokens.begin_array()
            items = []
            while tokens.has_next():
                items.append(
                    self._read_value(tokens, schema.items, registry, f"{path}[{len(items)}]")
                )
            tokens.end_array()
            return items
        if kind is SchemaType.MAP:
            return self._read_map(tokens, schema, registry, path)
        return self._read_record(tokens, resolve_record(schema, registry), registry, path)

    def _read_record(
        self,
        tokens: JsonTokenReader,
        definition: Schema,
        registry: Mapping[str, Schema],
        path: str,
    ) -> StructuredRecord:
        token = tokens.peek()
        if token is not JsonToken.BEGIN_OBJECT:
            raise _mismatch(definition, token, path)
        tokens.begin_object()
        builder = StructuredRecordBuilder(definition, registry=registry)
        seen: set[str] = set()
        while tokens.has_next():
            name = tokens.next_name()
            field_path = f"{path}.{name}" if path else name
            field = definition.get_field(name)
            if field is None:
                if not self._lenient:
                    raise SchemaMismatchError(
                        f"{field_path}: key is not a field of record '{definition.record_name}'."
                    )
                logger.debug("Discarding unknown key %s", field_path)
                tokens.skip_value()
                continue
            if name in seen:
                raise SchemaMismatchError(f"{field_path}: duplicate key.")
            seen.add(name)
            builder.set(name, self._read_value(tokens, field.schema, registry, field_path))
        tokens.end_object()
        return builder.build()

    def _read_map(
        self, tokens: JsonTokenReader, schema: Schema, registry: Mapping[str, Schema], path: str
    ) -> dict[Any, Any]:
        assert schema.key_schema is not None and schema.value_schema is not None
        token = tokens.peek()
        if token is not JsonToken.BEGIN_OBJECT:
            raise _mismatch(schema, token, path)
        key_schema = schema.key_schema.non_nullable()
        if not (key_schema.is_simple() or key_schema.schema_type is SchemaType.ENUM):
            raise SchemaMismatchError(
                f"{path}: map keys of type {key_schema.schema_type.value} cannot be read from JSON."
            )
        tokens.begin_object()
        entries: dict[Any, Any] = {}
        while tokens.has_next():
            name = tokens.next_name()
            key = parse_text(key_schema, name, f"{path}.<key>")
            entries[key] = self._read_value(
                tokens, schema.value_schema, registry, f"{path}[{name!r}]"
            )
        tokens.end_object()
        return entries

    def _read_union(
        self, tokens: JsonTokenReader, schema: Schema, registry: Mapping[str, Schema], path: str
    ) -> Any:
        token = tokens.peek()
        if schema.is_nullable():
            if token is JsonToken.NULL:
                tokens.next_null()
                return None
            return self._read_value(tokens, schema.non_nullable(), registry, path)
        if token is JsonToken.NULL and self._lenient and schema.accepts_null:
            tokens.next_null()
            return None
        if token is not JsonToken.BEGIN_OBJECT:
            raise SchemaMismatchError(
                f"{path}: union value must be an object keyed by the member index, "
                f"found {token.value}."
            )
        members = schema.members or ()
        tokens.begin_object()
        if not tokens.has_next():
            raise SchemaMismatchError(f"{path}: union object is empty.")
        tag = tokens.next_name()
        if not (tag.isascii() and tag.isdigit()) or int(tag) >= len(members):
            raise SchemaMismatchError(f"{path}: '{tag}' is not a member index of the union.")
        value = self._read_value(tokens, members[int(tag)], registry, path)
        if tokens.has_next():
            raise SchemaMismatchError(f"{path}: union object must have exactly one entry.")
        tokens.end_object()
        return value

    def _read_bytes(self, tokens: JsonTokenReader, path: str) -> bytes:
        token = tokens.peek()
        if token is not JsonToken.BEGIN_ARRAY:
            raise _mismatch(Schema.of(SchemaType.BYTES), token, path)
        tokens.begin_array()
        octets = bytearray()
        while tokens.has_next():
            if tokens.peek() is not JsonToken.NUMBER:
                raise CoercionError(f"{path}: bytes must be an array of numbers.")
            octet = coerce_number_literal(SchemaType.INT16, tokens.next_number(), path)
            if not 0 <= octet <= 255:
                raise CoercionError(f"{path}: {octet} is not a byte value.")
            octets.append(int(octet))
        tokens.end_array()
        return bytes(octets)


def _mismatch(schema: Schema, token: JsonToken, path: str) -> Exception:
    expected = schema.schema_type
    location = path or "<root>"
    message = f"{location}: expected {expected.value} but found {token.value}."
    if token in _SCALAR_TOKENS and (expected.is_simple or expected is SchemaType.ENUM):
        return CoercionError(message)
    return SchemaMismatchError(message)

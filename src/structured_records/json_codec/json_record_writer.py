"""Streaming JSON encoder for structured records."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, Protocol

from structured_records.errors import CoercionError, FormatError
from structured_records.record_model import StructuredRecord, conforms_to, format_text
from structured_records.schema_model import Schema, SchemaType, resolve_record


class TextSink(Protocol):
    """Minimal writable text stream."""

    def write(self, text: str, /) -> int: ...

    def flush(self) -> None: ...


class JsonRecordWriter:
    """Writes records as compact JSON, fields in schema order.

    Nullable fields are written as ``null``; values of other unions are written as a
    single-entry object keyed by the member index.
    """

    def __init__(self, sink: TextSink) -> None:
        self._sink = sink

    def write(self, record: StructuredRecord) -> None:
        """Encode one record; the sink is flushed whether or not encoding succeeds."""
        try:
            self._write_record(record.schema, record, record.schema.named_records, "")
        finally:
            self._sink.flush()

    def _write_value(
        self, schema: Schema, value: Any, registry: Mapping[str, Schema], path: str
    ) -> None:
        kind = schema.schema_type
        if kind is SchemaType.UNION:
            self._write_union(schema, value, registry, path)
            return
        if value is None:
            if kind is SchemaType.NULL:
                self._sink.write("null")
                return
            raise FormatError(f"{path or '<root>'}: null value for non-nullable {kind.value}.")
        if kind is SchemaType.BOOLEAN:
            self._sink.write("true" if value else "false")
        elif kind.is_integer:
            self._sink.write(str(int(value)))
        elif kind.is_floating:
            if not math.isfinite(value):
                raise FormatError(f"{path}: non-finite number {value} has no JSON form.")
            self._sink.write(json.dumps(float(value)))
        elif kind in (SchemaType.STRING, SchemaType.ENUM):
            self._sink.write(json.dumps(value, ensure_ascii=False))
        elif kind is SchemaType.BYTES:
            self._sink.write("[" + ",".join(str(octet) for octet in value) + "]")
        elif kind is SchemaType.ARRAY:
            assert schema.items is not None
            self._sink.write("[")
            for index, item in enumerate(value):
                if index:
                    self._sink.write(",")
                self._write_value(schema.items, item, registry, f"{path}[{index}]")
            self._sink.write("]")
        elif kind is SchemaType.MAP:
            self._write_map(schema, value, registry, path)
        elif kind is SchemaType.RECORD:
            self._write_record(resolve_record(schema, registry), value, registry, path)
        else:
            raise FormatError(f"{path}: unexpected value for {kind.value}.")

    def _write_record(
        self, schema: Schema, record: Any, registry: Mapping[str, Schema], path: str
    ) -> None:
        if not isinstance(record, StructuredRecord):
            raise FormatError(f"{path or '<root>'}: expected a record for '{schema.record_name}'.")
        self._sink.write("{")
        for index, field in enumerate(schema.fields or ()):
            if index:
                self._sink.write(",")
            self._sink.write(json.dumps(field.name, ensure_ascii=False))
            self._sink.write(":")
            field_path = f"{path}.{field.name}" if path else field.name
            self._write_value(field.schema, record.get(field.name), registry, field_path)
        self._sink.write("}")

    def _write_map(
        self, schema: Schema, value: Any, registry: Mapping[str, Schema], path: str
    ) -> None:
        assert schema.key_schema is not None and schema.value_schema is not None
        key_schema = schema.key_schema.non_nullable()
        if not (key_schema.is_simple() or key_schema.schema_type is SchemaType.ENUM):
            raise FormatError(
                f"{path}: map keys of type {key_schema.schema_type.value} have no JSON form."
            )
        self._sink.write("{")
        for index, (key, item) in enumerate(value.items()):
            if index:
                self._sink.write(",")
            try:
                key_text = format_text(key_schema, key)
            except CoercionError as exc:
                raise FormatError(f"{path}: {exc}") from exc
            self._sink.write(json.dumps(key_text, ensure_ascii=False))
            self._sink.write(":")
            self._write_value(schema.value_schema, item, registry, f"{path}[{key_text!r}]")
        self._sink.write("}")

    def _write_union(
        self, schema: Schema, value: Any, registry: Mapping[str, Schema], path: str
    ) -> None:
        if schema.is_nullable():
            if value is None:
                self._sink.write("null")
            else:
                self._write_value(schema.non_nullable(), value, registry, path)
            return
        for index, member in enumerate(schema.members or ()):
            if conforms_to(member, value, registry):
                self._sink.write(f'{{"{index}":')
                self._write_value(member, value, registry, path)
                self._sink.write("}")
                return
        raise FormatError(f"{path}: value does not match any union member.")

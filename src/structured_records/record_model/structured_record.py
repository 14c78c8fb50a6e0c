"""Schema-typed record container and its builder."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from structured_records.errors import (
    CoercionError,
    MissingFieldError,
    SchemaMismatchError,
    UnsupportedShapeError,
)
from structured_records.schema_model import Field, Schema, SchemaType, resolve_record

from .value_coercion import check_float, coerce_primitive, parse_text


class StructuredRecord(Mapping[str, Any]):
    """Immutable mapping from field name to value, ordered by the schema's fields.

    Records are created through :meth:`builder`. Arrays are held as tuples, maps as
    read-only mappings and enum values as their symbol name; the ordinal half of an
    enum value is derived from the schema by :meth:`enum_ordinal`.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: Schema, values: Mapping[str, Any]) -> None:
        self._schema = schema
        self._values = MappingProxyType(dict(values))

    @staticmethod
    def builder(schema: Schema) -> StructuredRecordBuilder:
        return StructuredRecordBuilder(schema)

    @property
    def schema(self) -> Schema:
        return self._schema

    def enum_ordinal(self, name: str) -> int | None:
        """Ordinal of the symbol held by enum field ``name``; None when the value is null."""
        field = self._schema.get_field(name)
        target = field.schema.non_nullable() if field is not None else None
        if target is None or target.schema_type is not SchemaType.ENUM:
            raise SchemaMismatchError(f"Field '{name}' is not an enum field.")
        symbol = self._values[name]
        return None if symbol is None else target.enum_index(symbol)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuredRecord):
            return NotImplemented
        return self._schema == other._schema and dict(self._values) == dict(other._values)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"StructuredRecord({self._schema.record_name}, {dict(self._values)!r})"


class StructuredRecordBuilder:
    """Single-owner, incremental construction of one StructuredRecord."""

    def __init__(self, schema: Schema, *, registry: Mapping[str, Schema] | None = None) -> None:
        if schema.schema_type is not SchemaType.RECORD or schema.is_reference:
            raise SchemaMismatchError("A record builder requires a record schema definition.")
        self._schema = schema
        self._registry = registry if registry is not None else schema.named_records
        self._values: dict[str, Any] = {}
        self._built = False

    @property
    def schema(self) -> Schema:
        return self._schema

    def set(self, name: str, value: Any) -> StructuredRecordBuilder:
        """Validate and coerce ``value`` for field ``name``."""
        field = self._require_field(name)
        self._values[name] = coerce_value(field.schema, value, self._registry, path=name)
        return self

    def convert_and_set(self, name: str, text: str | None) -> StructuredRecordBuilder:
        """Set a field from its text form; only simple or nullable simple fields qualify."""
        field = self._require_field(name)
        if text is None:
            return self.set(name, None)
        target = field.schema.non_nullable()
        if not target.is_simple():
            raise UnsupportedShapeError(
                f"Field '{name}' of type {target.schema_type.value} cannot be set from text."
            )
        self._values[name] = parse_text(target, text, path=name)
        return self

    def build(self) -> StructuredRecord:
        """Finalize the record; unset nullable fields become null."""
        self._ensure_open()
        values: dict[str, Any] = {}
        for field in self._schema.fields or ():
            if field.name in self._values:
                values[field.name] = self._values[field.name]
            elif field.schema.accepts_null:
                values[field.name] = None
            else:
                raise MissingFieldError(
                    f"Field '{field.name}' of record '{self._schema.record_name}' is required."
                )
        self._built = True
        return StructuredRecord(self._schema, values)

    def _require_field(self, name: str) -> Field:
        self._ensure_open()
        field = self._schema.get_field(name)
        if field is None:
            raise SchemaMismatchError(
                f"Field '{name}' is not defined in record '{self._schema.record_name}'."
            )
        return field

    def _ensure_open(self) -> None:
        if self._built:
            raise RuntimeError("Builder has already produced a record.")


def coerce_value(
    schema: Schema, value: Any, registry: Mapping[str, Schema], *, path: str
) -> Any:
    """Validate ``value`` against ``schema`` and return its normalized record form."""
    kind = schema.schema_type
    if kind is SchemaType.UNION:
        return _coerce_union(schema, value, registry, path)
    if value is None:
        if kind is SchemaType.NULL:
            return None
        raise CoercionError(f"{path}: null is not allowed for non-nullable {kind.value}.")
    if kind is SchemaType.NULL:
        raise CoercionError(f"{path}: expected null, got {type(value).__name__}.")
    if kind.is_simple:
        return coerce_primitive(kind, value, path)
    if kind is SchemaType.ENUM:
        return _coerce_enum(schema, value, path)
    if kind is SchemaType.ARRAY:
        assert schema.items is not None
        if isinstance(value, str | bytes | bytearray | Mapping) or not isinstance(value, Iterable):
            raise SchemaMismatchError(f"{path}: expected an array, got {type(value).__name__}.")
        return tuple(
            coerce_value(schema.items, item, registry, path=f"{path}[{index}]")
            for index, item in enumerate(value)
        )
    if kind is SchemaType.MAP:
        assert schema.key_schema is not None and schema.value_schema is not None
        if not isinstance(value, Mapping) or isinstance(value, StructuredRecord):
            raise SchemaMismatchError(f"{path}: expected a map, got {type(value).__name__}.")
        entries: dict[Any, Any] = {}
        for key, item in value.items():
            normalized_key = coerce_value(schema.key_schema, key, registry, path=f"{path}.<key>")
            entries[normalized_key] = coerce_value(
                schema.value_schema, item, registry, path=f"{path}[{key!r}]"
            )
        return MappingProxyType(entries)
    return _coerce_record(schema, value, registry, path)


def conforms_to(schema: Schema, value: Any, registry: Mapping[str, Schema]) -> bool:
    """True when ``value`` already is a normalized value of ``schema`` (no conversion)."""
    kind = schema.schema_type
    if kind is SchemaType.UNION:
        return any(conforms_to(member, value, registry) for member in schema.members or ())
    if value is None:
        return kind is SchemaType.NULL
    if kind is SchemaType.BOOLEAN:
        return isinstance(value, bool)
    if kind.is_integer:
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        return _fits(kind, value)
    if kind.is_floating:
        if not isinstance(value, float):
            return False
        return _fits(kind, value)
    if kind is SchemaType.STRING:
        return isinstance(value, str)
    if kind is SchemaType.BYTES:
        return isinstance(value, bytes)
    if kind is SchemaType.ENUM:
        return isinstance(value, str) and schema.enum_index(value) is not None
    if kind is SchemaType.ARRAY:
        assert schema.items is not None
        items = schema.items
        return isinstance(value, tuple | list) and all(
            conforms_to(items, item, registry) for item in value
        )
    if kind is SchemaType.MAP:
        assert schema.key_schema is not None and schema.value_schema is not None
        if not isinstance(value, Mapping) or isinstance(value, StructuredRecord):
            return False
        return all(
            conforms_to(schema.key_schema, key, registry)
            and conforms_to(schema.value_schema, item, registry)
            for key, item in value.items()
        )
    if kind is SchemaType.RECORD:
        definition = resolve_record(schema, registry)
        return (
            isinstance(value, StructuredRecord)
            and value.schema.record_name == definition.record_name
        )
    return False


def _fits(kind: SchemaType, value: int | float) -> bool:
    try:
        if isinstance(value, float):
            check_float(kind, value, "")
        else:
            coerce_primitive(kind, value, "")
    except CoercionError:
        return False
    return True


def _coerce_union(
    schema: Schema, value: Any, registry: Mapping[str, Schema], path: str
) -> Any:
    if schema.is_nullable():
        if value is None:
            return None
        return coerce_value(schema.non_nullable(), value, registry, path=path)
    members = schema.members or ()
    for member in members:
        if conforms_to(member, value, registry):
            return coerce_value(member, value, registry, path=path)
    failures: list[str] = []
    for member in members:
        try:
            return coerce_value(member, value, registry, path=path)
        except (CoercionError, SchemaMismatchError) as exc:
            failures.append(str(exc))
    raise CoercionError(
        f"{path}: value does not match any union member ({'; '.join(failures)})."
    )


def _coerce_enum(schema: Schema, value: Any, path: str) -> str:
    symbols = list(schema.symbols or ())
    if isinstance(value, enum.Enum):
        value = value.name
    if isinstance(value, str):
        if schema.enum_index(value) is None:
            raise CoercionError(f"{path}: '{value}' is not a symbol of {symbols}.")
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        symbol = schema.enum_symbol(value)
        if symbol is None:
            raise CoercionError(f"{path}: ordinal {value} is out of range for {symbols}.")
        return symbol
    raise CoercionError(f"{path}: {type(value).__name__} value is not an enum symbol.")


def _coerce_record(
    schema: Schema, value: Any, registry: Mapping[str, Schema], path: str
) -> StructuredRecord:
    definition = resolve_record(schema, registry)
    if isinstance(value, StructuredRecord):
        if value.schema.record_name != definition.record_name:
            raise SchemaMismatchError(
                f"{path}: expected record '{definition.record_name}', "
                f"got '{value.schema.record_name}'."
            )
        return value
    if isinstance(value, Mapping):
        builder = StructuredRecordBuilder(definition, registry=registry)
        for name, item in value.items():
            builder.set(name, item)
        return builder.build()
    raise SchemaMismatchError(f"{path}: expected a record, got {type(value).__name__}.")

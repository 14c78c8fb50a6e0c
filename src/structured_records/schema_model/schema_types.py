"""Schema model entities."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from types import MappingProxyType

from structured_records.errors import SchemaDefinitionError


class SchemaType(str, Enum):
    """Closed set of schema kinds; values are the canonical JSON type names."""

    NULL = "null"
    BOOLEAN = "boolean"
    INT8 = "byte"
    INT16 = "short"
    INT32 = "int"
    INT64 = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BYTES = "bytes"
    ENUM = "enum"
    ARRAY = "array"
    MAP = "map"
    RECORD = "record"
    UNION = "union"

    @property
    def is_simple(self) -> bool:
        """Primitive kinds that carry a single scalar value."""
        return self in SIMPLE_TYPES

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_BOUNDS

    @property
    def is_floating(self) -> bool:
        return self in (SchemaType.FLOAT, SchemaType.DOUBLE)


SIMPLE_TYPES = frozenset(
    {
        SchemaType.NULL,
        SchemaType.BOOLEAN,
        SchemaType.INT8,
        SchemaType.INT16,
        SchemaType.INT32,
        SchemaType.INT64,
        SchemaType.FLOAT,
        SchemaType.DOUBLE,
        SchemaType.STRING,
        SchemaType.BYTES,
    }
)

INTEGER_BOUNDS: Mapping[SchemaType, tuple[int, int]] = MappingProxyType(
    {
        SchemaType.INT8: (-(2**7), 2**7 - 1),
        SchemaType.INT16: (-(2**15), 2**15 - 1),
        SchemaType.INT32: (-(2**31), 2**31 - 1),
        SchemaType.INT64: (-(2**63), 2**63 - 1),
    }
)

PRIMITIVE_TYPE_NAMES = frozenset(schema_type.value for schema_type in SIMPLE_TYPES)


@dataclass(frozen=True)
class Field:
    """Named member of a record schema."""

    name: str
    schema: Schema

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaDefinitionError("Field name must be a non-empty string.")
        if not isinstance(self.schema, Schema):
            raise SchemaDefinitionError(f"Field '{self.name}' requires a Schema.")


@dataclass(frozen=True, repr=False)
class Schema:  # pylint: disable=too-many-instance-attributes
    """Immutable, structurally compared description of a value's shape.

    A record schema with ``fields`` set to ``None`` is a reference node: it names a
    record defined elsewhere in the enclosing schema, which is how recursive types
    are represented without unbounded nesting. Use the factory classmethods rather
    than calling the constructor directly.
    """

    schema_type: SchemaType
    symbols: tuple[str, ...] | None = None
    items: Schema | None = None
    key_schema: Schema | None = None
    value_schema: Schema | None = None
    record_name: str | None = None
    fields: tuple[Field, ...] | None = None
    members: tuple[Schema, ...] | None = None

    def __post_init__(self) -> None:
        schema_type = self.schema_type
        if schema_type is SchemaType.ARRAY and not isinstance(self.items, Schema):
            raise SchemaDefinitionError("Array schema requires an element schema.")
        if schema_type is SchemaType.MAP and not (
            isinstance(self.key_schema, Schema) and isinstance(self.value_schema, Schema)
        ):
            raise SchemaDefinitionError("Map schema requires key and value schemas.")
        if schema_type is SchemaType.ENUM:
            _validate_symbols(self.symbols)
        if schema_type is SchemaType.UNION:
            if not self.members:
                raise SchemaDefinitionError("Union schema requires at least one member.")
            for member in self.members:
                if not isinstance(member, Schema):
                    raise SchemaDefinitionError("Union members must be Schema instances.")
        if schema_type is SchemaType.RECORD:
            _validate_record(self.record_name, self.fields)

    # -- factories -----------------------------------------------------------------

    @classmethod
    def of(cls, schema_type: SchemaType) -> Schema:
        """Return the shared instance for a primitive type."""
        try:
            return _PRIMITIVES[SchemaType(schema_type)]
        except (KeyError, ValueError) as exc:
            raise SchemaDefinitionError(f"'{schema_type}' is not a primitive type.") from exc

    @classmethod
    def array_of(cls, items: Schema) -> Schema:
        return cls(SchemaType.ARRAY, items=items)

    @classmethod
    def map_of(cls, key_schema: Schema, value_schema: Schema) -> Schema:
        return cls(SchemaType.MAP, key_schema=key_schema, value_schema=value_schema)

    @classmethod
    def enum_with(cls, *symbols: str) -> Schema:
        return cls(SchemaType.ENUM, symbols=tuple(symbols))

    @classmethod
    def union_of(cls, *members: Schema) -> Schema:
        return cls(SchemaType.UNION, members=tuple(members))

    @classmethod
    def nullable_of(cls, schema: Schema) -> Schema:
        """Return ``union(null, schema)``; an already nullable schema is returned as is."""
        if schema.is_nullable():
            return schema
        return cls.union_of(cls.of(SchemaType.NULL), schema)

    @classmethod
    def record_of(
        cls, name: str, fields: Iterable[Field | tuple[str, Schema]]
    ) -> Schema:
        """Create a record definition; fields may be ``Field`` objects or name/schema pairs."""
        normalized = tuple(
            item if isinstance(item, Field) else Field(item[0], item[1]) for item in fields
        )
        return cls(SchemaType.RECORD, record_name=name, fields=normalized)

    @classmethod
    def record_ref(cls, name: str) -> Schema:
        """Create a reference to a record defined elsewhere in the same schema."""
        return cls(SchemaType.RECORD, record_name=name)

    # -- inspection ----------------------------------------------------------------

    @property
    def is_reference(self) -> bool:
        return self.schema_type is SchemaType.RECORD and self.fields is None

    def is_simple(self) -> bool:
        return self.schema_type.is_simple

    def is_nullable(self) -> bool:
        """True for the ``union(null, T)`` sugar (either member order)."""
        if self.schema_type is not SchemaType.UNION or self.members is None:
            return False
        if len(self.members) != 2:
            return False
        return sum(member.schema_type is SchemaType.NULL for member in self.members) == 1

    def non_nullable(self) -> Schema:
        """Return ``T`` for ``union(null, T)``, otherwise this schema."""
        if not self.is_nullable():
            return self
        assert self.members is not None
        return next(m for m in self.members if m.schema_type is not SchemaType.NULL)

    @property
    def accepts_null(self) -> bool:
        if self.schema_type is SchemaType.NULL:
            return True
        if self.schema_type is SchemaType.UNION and self.members:
            return any(member.schema_type is SchemaType.NULL for member in self.members)
        return False

    def is_simple_or_nullable_simple(self) -> bool:
        return self.non_nullable().is_simple()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields or ())

    def get_field(self, name: str) -> Field | None:
        return self._field_index.get(name)

    def enum_index(self, symbol: str) -> int | None:
        if self.symbols is None:
            return None
        try:
            return self.symbols.index(symbol)
        except ValueError:
            return None

    def enum_symbol(self, ordinal: int) -> str | None:
        if self.symbols is None or not 0 <= ordinal < len(self.symbols):
            return None
        return self.symbols[ordinal]

    @cached_property
    def _field_index(self) -> Mapping[str, Field]:
        return MappingProxyType({field.name: field for field in self.fields or ()})

    @cached_property
    def named_records(self) -> Mapping[str, Schema]:
        """Record definitions reachable from this schema, keyed by record name."""
        records: dict[str, Schema] = {}
        pending: list[Schema] = [self]
        while pending:
            current = pending.pop()
            kind = current.schema_type
            if kind is SchemaType.RECORD:
                if current.fields is None:
                    continue
                assert current.record_name is not None
                existing = records.get(current.record_name)
                if existing is not None:
                    if existing != current:
                        raise SchemaDefinitionError(
                            f"Record '{current.record_name}' has conflicting definitions."
                        )
                    continue
                records[current.record_name] = current
                pending.extend(field.schema for field in reversed(current.fields))
            elif kind is SchemaType.ARRAY:
                assert current.items is not None
                pending.append(current.items)
            elif kind is SchemaType.MAP:
                assert current.key_schema is not None and current.value_schema is not None
                pending.extend((current.value_schema, current.key_schema))
            elif kind is SchemaType.UNION:
                assert current.members is not None
                pending.extend(reversed(current.members))
        return MappingProxyType(records)

    def resolve(self, schema: Schema) -> Schema:
        """Return the record definition behind a reference node found in this schema."""
        return resolve_record(schema, self.named_records)

    def __repr__(self) -> str:
        kind = self.schema_type
        if kind is SchemaType.RECORD:
            suffix = " (ref)" if self.is_reference else ""
            return f"Schema(record {self.record_name}{suffix})"
        if kind is SchemaType.ARRAY:
            return f"Schema(array {self.items!r})"
        if kind is SchemaType.MAP:
            return f"Schema(map {self.key_schema!r} -> {self.value_schema!r})"
        if kind is SchemaType.UNION:
            return f"Schema(union {list(self.members or ())!r})"
        if kind is SchemaType.ENUM:
            return f"Schema(enum {list(self.symbols or ())!r})"
        return f"Schema({kind.value})"


def resolve_record(schema: Schema, registry: Mapping[str, Schema]) -> Schema:
    """Resolve a record reference against a name registry; other schemas pass through."""
    if not schema.is_reference:
        return schema
    assert schema.record_name is not None
    definition = registry.get(schema.record_name)
    if definition is None:
        raise SchemaDefinitionError(f"Unknown record reference '{schema.record_name}'.")
    return definition


def ensure_references_resolve(schema: Schema) -> None:
    """Raise SchemaDefinitionError if any reference node names an undefined record."""
    registry = schema.named_records
    pending: list[Schema] = [schema]
    while pending:
        current = pending.pop()
        if current.is_reference:
            resolve_record(current, registry)
        pending.extend(_children(current))


def _children(schema: Schema) -> tuple[Schema, ...]:
    kind = schema.schema_type
    if kind is SchemaType.RECORD:
        return tuple(field.schema for field in schema.fields or ())
    if kind is SchemaType.ARRAY and schema.items is not None:
        return (schema.items,)
    if kind is SchemaType.MAP and schema.key_schema and schema.value_schema:
        return (schema.key_schema, schema.value_schema)
    if kind is SchemaType.UNION:
        return schema.members or ()
    return ()


def _validate_symbols(symbols: tuple[str, ...] | None) -> None:
    if not symbols:
        raise SchemaDefinitionError("Enum schema requires at least one symbol.")
    seen: set[str] = set()
    for symbol in symbols:
        if not isinstance(symbol, str) or not symbol:
            raise SchemaDefinitionError("Enum symbols must be non-empty strings.")
        if symbol in seen:
            raise SchemaDefinitionError(f"Duplicate enum symbol: {symbol}")
        seen.add(symbol)


def _validate_record(name: str | None, fields: tuple[Field, ...] | None) -> None:
    if not isinstance(name, str) or not name:
        raise SchemaDefinitionError("Record schema requires a non-empty name.")
    if name in PRIMITIVE_TYPE_NAMES:
        raise SchemaDefinitionError(f"Record name '{name}' collides with a primitive type.")
    if fields is None:
        return
    if not fields:
        raise SchemaDefinitionError(f"No record field provided for '{name}'.")
    seen: set[str] = set()
    for field in fields:
        if not isinstance(field, Field):
            raise SchemaDefinitionError(f"Record '{name}' fields must be Field instances.")
        if field.name in seen:
            raise SchemaDefinitionError(f"Duplicate field '{field.name}' in record '{name}'.")
        seen.add(field.name)


_PRIMITIVES: Mapping[SchemaType, Schema] = MappingProxyType(
    {schema_type: Schema(schema_type) for schema_type in SIMPLE_TYPES}
)

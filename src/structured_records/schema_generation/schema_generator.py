"""Derive schemas from native Python types."""

from __future__ import annotations

import collections.abc
import enum
import io
import logging
import types
import typing
from typing import Any

from structured_records.errors import UnsupportedTypeError
from structured_records.schema_model import Field, Schema, SchemaType

from .type_descriptors import FieldDescriber, describe_fields

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[Any, SchemaType] = {
    bool: SchemaType.BOOLEAN,
    int: SchemaType.INT64,
    float: SchemaType.DOUBLE,
    str: SchemaType.STRING,
    bytes: SchemaType.BYTES,
    bytearray: SchemaType.BYTES,
}

_ARRAY_ORIGINS = frozenset(
    {
        list,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Collection,
        collections.abc.Iterable,
    }
)

_MAP_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})

_UNSUPPORTED_BASES: tuple[type, ...] = (io.IOBase, typing.IO)

# record name -> (class, finished definition or None while its fields are generated)
_KnownRecords = dict[str, tuple[type, Schema | None]]


class SchemaGenerator:
    """Generates a Schema from a native type via depth-first reflection.

    Composite classes become records named after the class. A class met again
    while its own fields are still being generated is emitted as a record
    reference so self-referential types stay finite; later repeats reuse the
    finished definition.
    """

    def __init__(self, describer: FieldDescriber = describe_fields) -> None:
        self._describer = describer

    def generate(self, native_type: Any) -> Schema:
        known_records: _KnownRecords = {}
        return self._generate(native_type, known_records)

    def _generate(self, native_type: Any, known_records: _KnownRecords) -> Schema:
        if native_type is None or native_type is types.NoneType:
            return Schema.of(SchemaType.NULL)

        origin = typing.get_origin(native_type)
        args = typing.get_args(native_type)
        if origin is typing.Annotated:
            return self._generate_annotated(args, known_records)
        if origin is typing.Union or origin is types.UnionType:
            return self._generate_union(args, known_records)
        if origin is not None:
            return self._generate_container(native_type, origin, args, known_records)

        if native_type in _PRIMITIVES:
            return Schema.of(_PRIMITIVES[native_type])
        if isinstance(native_type, type):
            if issubclass(native_type, enum.Enum):
                return Schema.enum_with(*(member.name for member in native_type))
            if native_type in _ARRAY_ORIGINS or native_type in _MAP_ORIGINS or native_type is tuple:
                raise UnsupportedTypeError(
                    f"Collection type {native_type.__name__} needs element type parameters."
                )
            if native_type in (object, typing.Any) or issubclass(native_type, _UNSUPPORTED_BASES):
                raise UnsupportedTypeError(f"No schema mapping for type {native_type!r}.")
            return self._generate_record(native_type, known_records)
        raise UnsupportedTypeError(f"No schema mapping for type {native_type!r}.")

    def _generate_annotated(
        self, args: tuple[Any, ...], known_records: _KnownRecords
    ) -> Schema:
        base, *metadata = args
        widths = [item for item in metadata if isinstance(item, SchemaType)]
        if not widths:
            return self._generate(base, known_records)
        width = widths[0]
        if width.is_integer and base is int:
            return Schema.of(width)
        if width.is_floating and base in (float, int):
            return Schema.of(width)
        raise UnsupportedTypeError(f"{width.value} cannot be applied to type {base!r}.")

    def _generate_union(self, args: tuple[Any, ...], known_records: _KnownRecords) -> Schema:
        nullable = types.NoneType in args
        members = [
            self._generate(arg, known_records) for arg in args if arg is not types.NoneType
        ]
        if nullable:
            members.insert(0, Schema.of(SchemaType.NULL))
        return Schema.union_of(*members)

    def _generate_container(
        self,
        native_type: Any,
        origin: Any,
        args: tuple[Any, ...],
        known_records: _KnownRecords,
    ) -> Schema:
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return Schema.array_of(self._generate(args[0], known_records))
            raise UnsupportedTypeError(
                f"Only homogeneous tuple[T, ...] is supported, got {native_type!r}."
            )
        if origin in _ARRAY_ORIGINS and len(args) == 1:
            return Schema.array_of(self._generate(args[0], known_records))
        if origin in _MAP_ORIGINS and len(args) == 2:
            key_schema = self._generate(args[0], known_records)
            if not key_schema.is_simple() or key_schema.schema_type is SchemaType.NULL:
                raise UnsupportedTypeError(
                    f"Map keys must map to a primitive type, got {args[0]!r}."
                )
            return Schema.map_of(key_schema, self._generate(args[1], known_records))
        raise UnsupportedTypeError(f"No schema mapping for type {native_type!r}.")

    def _generate_record(self, native_type: type, known_records: _KnownRecords) -> Schema:
        name = native_type.__name__
        known = known_records.get(name)
        if known is not None:
            known_type, definition = known
            if known_type is not native_type:
                raise UnsupportedTypeError(
                    f"Record name '{name}' is shared by {known_type!r} and {native_type!r}."
                )
            if definition is not None:
                return definition
            logger.debug("Type %s is recursive, emitting a record reference", name)
            return Schema.record_ref(name)

        descriptors = self._describer(native_type)
        if not descriptors:
            raise UnsupportedTypeError(f"No schema mapping for type {native_type!r}.")
        # registered before descending so that recursive members become references
        known_records[name] = (native_type, None)
        fields = []
        for descriptor in descriptors:
            try:
                field_schema = self._generate(descriptor.annotation, known_records)
            except UnsupportedTypeError as exc:
                raise UnsupportedTypeError(f"{name}.{descriptor.name}: {exc}") from exc
            fields.append(Field(descriptor.name, field_schema))
        schema = Schema.record_of(name, fields)
        known_records[name] = (native_type, schema)
        return schema


def generate_schema(native_type: Any) -> Schema:
    """Generate a Schema for ``native_type`` with the default class describer."""
    return SchemaGenerator().generate(native_type)

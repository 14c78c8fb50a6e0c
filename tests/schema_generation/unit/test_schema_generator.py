"""Schema generation from native Python types."""

from __future__ import annotations

import enum
import io
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, NamedTuple, Optional

import pytest
from structured_records.errors import UnsupportedTypeError
from structured_records.schema_generation import (
    FieldDescriptor,
    SchemaGenerator,
    describe_fields,
    generate_schema,
)
from structured_records.schema_model import Schema, SchemaType, schema_to_json

STRING = Schema.of(SchemaType.STRING)
INT64 = Schema.of(SchemaType.INT64)


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Address:
    street: str
    zip_code: Optional[int]


@dataclass
class Customer:
    name: str
    age: Annotated[int, SchemaType.INT32]
    email: str | None
    tags: list[str]
    scores: dict[str, float]
    favorite: Color
    home: Address
    work: Address | None


@dataclass
class TreeNode:
    value: int
    children: list[TreeNode]
    parent: TreeNode | None


class Pair(NamedTuple):
    left: str
    right: int


@dataclass
class PointA:
    x: int
    y: int


@dataclass
class PointB:
    x: int
    y: int


@dataclass
class Callback:
    handler: Callable[[int], int]


@dataclass
class Reader:
    stream: io.StringIO


@dataclass
class Dynamic:
    payload: Any


@dataclass
class RecordKeyed:
    lookup: dict[Address, int]


@dataclass
class Untyped:
    items: list  # type: ignore[type-arg]


@dataclass
class Inner:
    label: str


@dataclass
class Outer:
    a: Inner
    b: Inner


@dataclass
class Containers:
    ids: tuple[int, ...]
    labels: Sequence[str]
    unique: frozenset[bytes]
    weights: Mapping[int, Annotated[float, SchemaType.FLOAT]]
    flag: bool


def _address() -> Schema:
    return Schema.record_of(
        "Address", [("street", STRING), ("zip_code", Schema.nullable_of(INT64))]
    )


def test_dataclass_generates_record_with_all_field_kinds() -> None:
    schema = generate_schema(Customer)

    assert schema == Schema.record_of(
        "Customer",
        [
            ("name", STRING),
            ("age", Schema.of(SchemaType.INT32)),
            ("email", Schema.nullable_of(STRING)),
            ("tags", Schema.array_of(STRING)),
            ("scores", Schema.map_of(STRING, Schema.of(SchemaType.DOUBLE))),
            ("favorite", Schema.enum_with("RED", "GREEN")),
            ("home", _address()),
            ("work", Schema.nullable_of(_address())),
        ],
    )


def test_generation_is_deterministic() -> None:
    assert schema_to_json(generate_schema(Customer)) == schema_to_json(generate_schema(Customer))


def test_self_referential_type_terminates_with_references() -> None:
    schema = generate_schema(TreeNode)

    assert schema == Schema.record_of(
        "TreeNode",
        [
            ("value", INT64),
            ("children", Schema.array_of(Schema.record_ref("TreeNode"))),
            ("parent", Schema.nullable_of(Schema.record_ref("TreeNode"))),
        ],
    )
    assert schema.resolve(Schema.record_ref("TreeNode")) is schema


def test_named_tuple_fields_are_generated_in_declaration_order() -> None:
    schema = generate_schema(Pair)

    assert schema == Schema.record_of("Pair", [("left", STRING), ("right", INT64)])


def test_collections_map_to_arrays_and_maps() -> None:
    schema = generate_schema(Containers)

    assert schema == Schema.record_of(
        "Containers",
        [
            ("ids", Schema.array_of(INT64)),
            ("labels", Schema.array_of(STRING)),
            ("unique", Schema.array_of(Schema.of(SchemaType.BYTES))),
            ("weights", Schema.map_of(INT64, Schema.of(SchemaType.FLOAT))),
            ("flag", Schema.of(SchemaType.BOOLEAN)),
        ],
    )


def test_structurally_identical_types_differ_by_name() -> None:
    first = generate_schema(PointA)
    second = generate_schema(PointB)

    assert first != second
    assert first.fields == second.fields


def test_primitive_types_generate_simple_schemas() -> None:
    assert generate_schema(int) is INT64
    assert generate_schema(str) is STRING
    assert generate_schema(Optional[float]) == Schema.nullable_of(Schema.of(SchemaType.DOUBLE))
    assert generate_schema(int | str) == Schema.union_of(INT64, STRING)


@pytest.mark.parametrize(
    ("native_type", "message"),
    [
        (Callback, "Callback.handler"),
        (Reader, "Reader.stream"),
        (Dynamic, "Dynamic.payload"),
        (RecordKeyed, "Map keys"),
        (Untyped, "needs element type parameters"),
        (object, "No schema mapping"),
        (tuple[int, str], "homogeneous tuple"),
    ],
)
def test_unsupported_types_raise(native_type: Any, message: str) -> None:
    with pytest.raises(UnsupportedTypeError, match=message):
        generate_schema(native_type)


def test_distinct_classes_sharing_a_name_are_rejected() -> None:
    first = type("Clash", (), {"__annotations__": {"x": int}})
    second = type("Clash", (), {"__annotations__": {"y": str}})
    holder = type("Holder", (), {"__annotations__": {"a": first, "b": second}})

    with pytest.raises(UnsupportedTypeError, match="shared by"):
        generate_schema(holder)


def test_custom_describer_replaces_reflection() -> None:
    class Opaque:
        pass

    def describer(native_type: type) -> Sequence[FieldDescriptor] | None:
        if native_type is Opaque:
            return (FieldDescriptor("token", str), FieldDescriptor("pair", Pair))
        return describe_fields(native_type)

    schema = SchemaGenerator(describer).generate(Opaque)

    assert schema == Schema.record_of(
        "Opaque",
        [
            ("token", STRING),
            ("pair", Schema.record_of("Pair", [("left", STRING), ("right", INT64)])),
        ],
    )


def test_repeated_non_recursive_type_is_inlined_and_equals_hand_built_schema() -> None:
    inner = Schema.record_of("Inner", [("label", STRING)])

    schema = generate_schema(Outer)

    assert schema == Schema.record_of("Outer", [("a", inner), ("b", inner)])
    assert hash(schema) == hash(Schema.record_of("Outer", [("a", inner), ("b", inner)]))
    assert not any(field.schema.is_reference for field in schema.fields or ())

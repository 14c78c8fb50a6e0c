"""Schema model tests."""

from __future__ import annotations

import pytest
from structured_records.errors import SchemaDefinitionError
from structured_records.schema_model import Field, Schema, SchemaType

STRING = Schema.of(SchemaType.STRING)
INT32 = Schema.of(SchemaType.INT32)
NULL = Schema.of(SchemaType.NULL)


def _person(name: str = "Person") -> Schema:
    return Schema.record_of(name, [("name", STRING), ("age", Schema.nullable_of(INT32))])


def test_primitive_schemas_are_shared_instances() -> None:
    assert Schema.of(SchemaType.INT32) is Schema.of(SchemaType.INT32)
    assert Schema.of("string") is STRING


def test_non_primitive_type_cannot_be_interned() -> None:
    with pytest.raises(SchemaDefinitionError, match="not a primitive"):
        Schema.of(SchemaType.RECORD)


def test_independently_built_schemas_are_equal_and_hash_alike() -> None:
    first = _person()
    second = Schema.record_of(
        "Person",
        [Field("name", Schema(SchemaType.STRING)), Field("age", Schema.union_of(NULL, INT32))],
    )

    assert first == second
    assert hash(first) == hash(second)
    assert {first: "found"}[second] == "found"


def test_union_member_order_is_significant() -> None:
    assert Schema.union_of(INT32, STRING) == Schema.union_of(INT32, STRING)
    assert Schema.union_of(INT32, STRING) != Schema.union_of(STRING, INT32)


def test_records_with_different_names_share_equal_fields() -> None:
    first = _person("Person")
    second = _person("Employee")

    assert first != second
    assert first.fields == second.fields


def test_duplicate_field_names_are_rejected() -> None:
    with pytest.raises(SchemaDefinitionError, match="Duplicate field 'name'"):
        Schema.record_of("Person", [("name", STRING), ("name", INT32)])


def test_empty_union_is_rejected() -> None:
    with pytest.raises(SchemaDefinitionError, match="at least one member"):
        Schema.union_of()


@pytest.mark.parametrize("symbols", [(), ("RED", "RED"), ("RED", "")])
def test_invalid_enum_symbols_are_rejected(symbols: tuple[str, ...]) -> None:
    with pytest.raises(SchemaDefinitionError):
        Schema.enum_with(*symbols)


def test_record_name_must_not_collide_with_primitive_names() -> None:
    with pytest.raises(SchemaDefinitionError, match="collides"):
        Schema.record_of("int", [("value", INT32)])


def test_record_requires_fields() -> None:
    with pytest.raises(SchemaDefinitionError, match="No record field"):
        Schema.record_of("Empty", [])


def test_schema_is_immutable() -> None:
    schema = _person()

    with pytest.raises(AttributeError):
        schema.record_name = "Other"  # type: ignore[misc]


def test_nullable_detection_covers_both_member_orders() -> None:
    assert Schema.union_of(NULL, INT32).is_nullable()
    assert Schema.union_of(INT32, NULL).is_nullable()
    assert not Schema.union_of(NULL, INT32, STRING).is_nullable()
    assert not Schema.union_of(INT32, STRING).is_nullable()
    assert Schema.union_of(INT32, NULL).non_nullable() is INT32
    assert STRING.non_nullable() is STRING


def test_nullable_of_does_not_wrap_twice() -> None:
    nullable = Schema.nullable_of(INT32)

    assert Schema.nullable_of(nullable) is nullable
    assert nullable.members == (NULL, INT32)


def test_accepts_null_includes_multi_member_unions() -> None:
    assert NULL.accepts_null
    assert Schema.union_of(NULL, INT32, STRING).accepts_null
    assert not Schema.union_of(INT32, STRING).accepts_null
    assert not INT32.accepts_null


def test_field_lookup_and_enum_helpers() -> None:
    schema = _person()
    colors = Schema.enum_with("RED", "GREEN")

    assert schema.field_names == ("name", "age")
    assert schema.get_field("age") == Field("age", Schema.nullable_of(INT32))
    assert schema.get_field("missing") is None
    assert colors.enum_index("GREEN") == 1
    assert colors.enum_index("BLUE") is None
    assert colors.enum_symbol(0) == "RED"
    assert colors.enum_symbol(2) is None


def test_simple_or_nullable_simple() -> None:
    assert INT32.is_simple_or_nullable_simple()
    assert Schema.nullable_of(STRING).is_simple_or_nullable_simple()
    assert not Schema.array_of(STRING).is_simple_or_nullable_simple()
    assert not Schema.enum_with("A").is_simple_or_nullable_simple()


def test_self_referential_record_resolves_to_itself() -> None:
    node = Schema.record_of(
        "Node",
        [("value", INT32), ("next", Schema.nullable_of(Schema.record_ref("Node")))],
    )
    next_field = node.get_field("next")
    assert next_field is not None

    reference = next_field.schema.non_nullable()

    assert reference.is_reference
    assert dict(node.named_records) == {"Node": node}
    assert node.resolve(reference) is node


def test_unknown_reference_fails_to_resolve() -> None:
    schema = Schema.record_of("Holder", [("item", Schema.record_ref("Missing"))])
    field = schema.get_field("item")
    assert field is not None

    with pytest.raises(SchemaDefinitionError, match="Unknown record reference 'Missing'"):
        schema.resolve(field.schema)


def test_conflicting_record_definitions_are_rejected() -> None:
    schema = Schema.record_of(
        "Holder",
        [
            ("first", Schema.record_of("Item", [("id", INT32)])),
            ("second", Schema.record_of("Item", [("id", STRING)])),
        ],
    )

    with pytest.raises(SchemaDefinitionError, match="conflicting definitions"):
        _ = schema.named_records

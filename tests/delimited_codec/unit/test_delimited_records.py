"""Delimited line encoding and decoding."""

from __future__ import annotations

import pytest
from structured_records.delimited_codec import decode_delimited, encode_delimited
from structured_records.errors import (
    CoercionError,
    FieldCountMismatchError,
    MissingFieldError,
    UnsupportedShapeError,
)
from structured_records.record_model import StructuredRecord
from structured_records.schema_model import Schema, SchemaType

STRING = Schema.of(SchemaType.STRING)

PERSON = Schema.record_of(
    "Person", [("name", STRING), ("age", Schema.nullable_of(Schema.of(SchemaType.INT32)))]
)
FLAT = Schema.record_of(
    "Flat",
    [
        ("flag", Schema.of(SchemaType.BOOLEAN)),
        ("count", Schema.nullable_of(Schema.of(SchemaType.INT64))),
        ("ratio", Schema.of(SchemaType.DOUBLE)),
        ("raw", Schema.of(SchemaType.BYTES)),
        ("label", STRING),
    ],
)
NESTED = Schema.record_of("Nested", [("name", STRING), ("tags", Schema.array_of(STRING))])


def _flat(label: str = "x") -> StructuredRecord:
    return (
        StructuredRecord.builder(FLAT)
        .set("flag", True)
        .set("ratio", 0.25)
        .set("raw", b"hi")
        .set("label", label)
        .build()
    )


def test_null_field_encodes_as_empty_token() -> None:
    record = StructuredRecord.builder(PERSON).set("name", "Ann").build()

    assert encode_delimited(record, ",") == "Ann,"


def test_empty_token_decodes_to_null_for_nullable_field() -> None:
    record = decode_delimited("Ann,", ",", PERSON)

    assert dict(record) == {"name": "Ann", "age": None}


def test_every_simple_type_survives_a_round_trip() -> None:
    record = _flat()
    line = encode_delimited(record, ",")

    assert line == "true,,0.25,aGk=,x"
    assert decode_delimited(line, ",", FLAT) == record


def test_multi_character_delimiter_is_used_literally() -> None:
    record = decode_delimited("Ann||30", "||", PERSON)

    assert record["age"] == 30
    assert encode_delimited(record, "||") == "Ann||30"


@pytest.mark.parametrize("line", ["Ann,30,extra", "Ann", ""])
def test_token_count_must_match_field_count(line: str) -> None:
    with pytest.raises(FieldCountMismatchError, match="Expected 2 fields"):
        decode_delimited(line, ",", PERSON)


def test_value_containing_the_delimiter_does_not_decode() -> None:
    line = encode_delimited(_flat(label="a,b"), ",")

    with pytest.raises(FieldCountMismatchError):
        decode_delimited(line, ",", FLAT)


def test_empty_token_for_required_field_is_rejected() -> None:
    with pytest.raises(MissingFieldError, match="'name'"):
        decode_delimited(",30", ",", PERSON)


def test_out_of_range_token_is_rejected() -> None:
    with pytest.raises(CoercionError):
        decode_delimited("Ann,2147483648", ",", PERSON)


def test_nested_schemas_are_rejected_both_ways() -> None:
    record = StructuredRecord.builder(NESTED).set("name", "n").set("tags", ["a"]).build()

    with pytest.raises(UnsupportedShapeError, match="'tags'"):
        encode_delimited(record, ",")
    with pytest.raises(UnsupportedShapeError, match="'tags'"):
        decode_delimited("n,a", ",", NESTED)


def test_enum_fields_are_not_flat() -> None:
    colors = Schema.record_of("Paint", [("color", Schema.enum_with("RED"))])

    with pytest.raises(UnsupportedShapeError):
        decode_delimited("RED", ",", colors)


def test_delimiter_must_not_be_empty() -> None:
    with pytest.raises(ValueError, match="Delimiter"):
        decode_delimited("Ann,", "", PERSON)


@pytest.mark.parametrize("schema_type", [SchemaType.FLOAT, SchemaType.DOUBLE])
def test_floating_overflow_follows_json_rules(schema_type: SchemaType) -> None:
    measure = Schema.record_of("Measure", [("x", Schema.of(schema_type))])

    with pytest.raises(CoercionError, match="does not fit"):
        decode_delimited("1e400", ",", measure)


def test_trailing_line_terminator_is_not_part_of_an_integer_token() -> None:
    with pytest.raises(CoercionError):
        decode_delimited("Ann,30\n", ",", PERSON)

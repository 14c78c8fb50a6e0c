"""Canonical JSON text form of a schema (Avro-style)."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from structured_records.errors import SchemaDefinitionError

from .schema_types import (
    PRIMITIVE_TYPE_NAMES,
    Field,
    Schema,
    SchemaType,
    ensure_references_resolve,
)


def parse_schema(text: str) -> Schema:
    """Parse schema JSON text into a Schema."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaDefinitionError(f"Invalid schema JSON: {exc}") from exc
    return schema_from_document(document)


def schema_from_document(document: Any) -> Schema:
    """Build a Schema from an already decoded JSON document."""
    schema = _parse_node(document, defined=set())
    ensure_references_resolve(schema)
    return schema


def schema_to_json(schema: Schema, *, indent: int | None = None) -> str:
    """Serialize a Schema; ``parse_schema(schema_to_json(s)) == s``."""
    separators = (",", ":") if indent is None else None
    return json.dumps(schema_to_document(schema), indent=indent, separators=separators)


def schema_to_document(schema: Schema) -> Any:
    kind = schema.schema_type
    if kind.is_simple:
        return kind.value
    if kind is SchemaType.ARRAY:
        assert schema.items is not None
        return {"type": "array", "items": schema_to_document(schema.items)}
    if kind is SchemaType.MAP:
        assert schema.key_schema is not None and schema.value_schema is not None
        return {
            "type": "map",
            "keys": schema_to_document(schema.key_schema),
            "values": schema_to_document(schema.value_schema),
        }
    if kind is SchemaType.ENUM:
        return {"type": "enum", "symbols": list(schema.symbols or ())}
    if kind is SchemaType.UNION:
        return [schema_to_document(member) for member in schema.members or ()]
    if schema.is_reference:
        return schema.record_name
    return {
        "type": "record",
        "name": schema.record_name,
        "fields": [
            {"name": field.name, "type": schema_to_document(field.schema)}
            for field in schema.fields or ()
        ],
    }


def _parse_node(node: Any, *, defined: set[str]) -> Schema:
    if isinstance(node, str):
        if node in PRIMITIVE_TYPE_NAMES:
            return Schema.of(SchemaType(node))
        if node in defined:
            return Schema.record_ref(node)
        raise SchemaDefinitionError(f"Unknown schema type or record reference: {node}")
    if isinstance(node, list):
        return Schema.union_of(*(_parse_node(member, defined=defined) for member in node))
    if not isinstance(node, Mapping):
        raise SchemaDefinitionError("Schema nodes must be strings, lists or objects.")

    type_name = node.get("type")
    if isinstance(type_name, list | Mapping):
        return _parse_node(type_name, defined=defined)
    if not isinstance(type_name, str):
        raise SchemaDefinitionError("Schema object is missing a valid 'type'.")
    if type_name in PRIMITIVE_TYPE_NAMES:
        return Schema.of(SchemaType(type_name))
    if type_name == "array":
        if "items" not in node:
            raise SchemaDefinitionError("Array schema requires 'items'.")
        return Schema.array_of(_parse_node(node["items"], defined=defined))
    if type_name == "map":
        if "values" not in node:
            raise SchemaDefinitionError("Map schema requires 'values'.")
        key_schema = _parse_node(node.get("keys", "string"), defined=defined)
        return Schema.map_of(key_schema, _parse_node(node["values"], defined=defined))
    if type_name == "enum":
        symbols = node.get("symbols")
        if not isinstance(symbols, Sequence) or isinstance(symbols, str):
            raise SchemaDefinitionError("Enum schema requires a symbols array.")
        return Schema.enum_with(*symbols)
    if type_name == "record":
        return _parse_record(node, defined=defined)
    if type_name in defined:
        return Schema.record_ref(type_name)
    raise SchemaDefinitionError(f"Unknown schema type or record reference: {type_name}")


def _parse_record(node: Mapping[str, Any], *, defined: set[str]) -> Schema:
    name = node.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaDefinitionError("Record schema requires a name.")
    raw_fields = node.get("fields")
    if not isinstance(raw_fields, Sequence) or isinstance(raw_fields, str):
        raise SchemaDefinitionError(f"Record '{name}' requires a fields array.")
    # registered first so that fields can refer back to the enclosing record
    defined.add(name)
    fields: list[Field] = []
    for raw_field in raw_fields:
        if not isinstance(raw_field, Mapping) or "name" not in raw_field:
            raise SchemaDefinitionError("Record field definitions must include a name.")
        if "type" not in raw_field:
            raise SchemaDefinitionError(f"Field '{raw_field['name']}' requires a type.")
        fields.append(Field(raw_field["name"], _parse_node(raw_field["type"], defined=defined)))
    return Schema.record_of(name, fields)

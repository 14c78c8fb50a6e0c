"""Schema generation exports."""

from .schema_generator import SchemaGenerator, generate_schema
from .type_descriptors import FieldDescriber, FieldDescriptor, describe_fields

__all__ = [
    "FieldDescriber",
    "FieldDescriptor",
    "SchemaGenerator",
    "describe_fields",
    "generate_schema",
]

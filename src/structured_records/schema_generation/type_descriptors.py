"""Reflection over native composite types."""

from __future__ import annotations

import dataclasses
import inspect
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from structured_records.errors import UnsupportedTypeError


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared member of a composite type."""

    name: str
    annotation: Any


FieldDescriber = Callable[[type], Sequence[FieldDescriptor] | None]


def describe_fields(native_type: type) -> tuple[FieldDescriptor, ...] | None:
    """Return the declared fields of a class in declaration order.

    Dataclasses report their dataclass fields; other classes (including
    ``NamedTuple`` and plain annotated classes) report their annotated public
    attributes, base classes first. Returns ``None`` for classes that declare no
    fields.
    """
    if not isinstance(native_type, type):
        return None
    hints = _resolve_hints(native_type)
    if dataclasses.is_dataclass(native_type):
        return tuple(
            FieldDescriptor(field.name, hints.get(field.name, field.type))
            for field in dataclasses.fields(native_type)
        )

    names: list[str] = []
    for klass in reversed(native_type.__mro__):
        if klass is object:
            continue
        for name in inspect.get_annotations(klass):
            if name.startswith("_") or name in names:
                continue
            if typing.get_origin(hints.get(name)) is typing.ClassVar:
                continue
            names.append(name)
    if not names:
        return None
    return tuple(FieldDescriptor(name, hints[name]) for name in names)


def _resolve_hints(native_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(
            native_type,
            localns={native_type.__name__: native_type},
            include_extras=True,
        )
    except (NameError, TypeError) as exc:
        raise UnsupportedTypeError(
            f"Cannot resolve field annotations of {native_type.__qualname__}: {exc}"
        ) from exc

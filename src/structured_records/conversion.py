"""Conversions between structured records and their JSON or delimited text forms."""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from typing import TextIO

from structured_records.delimited_codec import decode_delimited, encode_delimited
from structured_records.errors import RecordCodecError
from structured_records.json_codec import (
    DEFAULT_MAX_DEPTH,
    JsonRecordReader,
    JsonRecordWriter,
    TextSink,
)
from structured_records.record_model import StructuredRecord
from structured_records.schema_model import Schema


def to_json(record: StructuredRecord) -> str:
    """Converts a record to a compact JSON string."""
    sink = io.StringIO()
    JsonRecordWriter(sink).write(record)
    return sink.getvalue()


def from_json(
    text: str, schema: Schema, *, lenient: bool = False, max_depth: int = DEFAULT_MAX_DEPTH
) -> StructuredRecord:
    """Converts a JSON string to a record based on the schema."""
    return JsonRecordReader(lenient=lenient, max_depth=max_depth).read(text, schema)


def to_delimited(record: StructuredRecord, delimiter: str) -> str:
    """Converts a record with a flat schema to a delimited string."""
    return encode_delimited(record, delimiter)


def from_delimited(text: str, delimiter: str, schema: Schema) -> StructuredRecord:
    """Converts a delimited string to a record based on the schema."""
    return decode_delimited(text, delimiter, schema)


def write_json_records(records: Iterable[StructuredRecord], sink: TextSink) -> int:
    """Write newline-delimited JSON, one record per line; returns the record count."""
    writer = JsonRecordWriter(sink)
    count = 0
    try:
        for record in records:
            writer.write(record)
            sink.write("\n")
            count += 1
    finally:
        sink.flush()
    return count


def read_json_records(
    source: TextIO, schema: Schema, *, lenient: bool = False, max_depth: int = DEFAULT_MAX_DEPTH
) -> Iterator[StructuredRecord]:
    """Yield one record per non-blank line of newline-delimited JSON.

    Errors are re-raised with the same type and the offending line number.
    """
    reader = JsonRecordReader(lenient=lenient, max_depth=max_depth)
    for line_number, line in enumerate(source, start=1):
        if not line.strip():
            continue
        try:
            record = reader.read(line, schema)
        except RecordCodecError as exc:
            raise type(exc)(f"line {line_number}: {exc}") from exc
        yield record


def write_delimited_records(
    records: Iterable[StructuredRecord], sink: TextSink, delimiter: str
) -> int:
    """Write one delimited line per record; returns the record count."""
    count = 0
    try:
        for record in records:
            sink.write(encode_delimited(record, delimiter))
            sink.write("\n")
            count += 1
    finally:
        sink.flush()
    return count


def read_delimited_records(
    source: TextIO, delimiter: str, schema: Schema
) -> Iterator[StructuredRecord]:
    """Yield one record per line; line terminators are not part of the last field."""
    for line_number, line in enumerate(source, start=1):
        try:
            record = decode_delimited(line.rstrip("\r\n"), delimiter, schema)
        except RecordCodecError as exc:
            raise type(exc)(f"line {line_number}: {exc}") from exc
        yield record

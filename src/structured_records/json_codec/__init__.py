"""JSON codec exports."""

from .json_record_reader import JsonRecordReader
from .json_record_writer import JsonRecordWriter, TextSink
from .json_tokens import DEFAULT_MAX_DEPTH, JsonToken, JsonTokenReader

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "JsonRecordReader",
    "JsonRecordWriter",
    "JsonToken",
    "JsonTokenReader",
    "TextSink",
]

"""Delimited codec exports."""

from .delimited_records import decode_delimited, encode_delimited, ensure_flat_schema

__all__ = ["decode_delimited", "encode_delimited", "ensure_flat_schema"]

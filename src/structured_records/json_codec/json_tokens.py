"""Pull-based JSON token reader."""

from __future__ import annotations

import io
import json
import re
from enum import Enum
from json.decoder import scanstring
from typing import TextIO

from structured_records.errors import StreamError

DEFAULT_CHUNK_SIZE = 8192
DEFAULT_MAX_DEPTH = 64

_NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][-+]?\d+)?")
_NUMBER_CHARS = frozenset("0123456789+-.eE")
_WHITESPACE = " \t\n\r"
_LITERALS = {"t": "true", "f": "false", "n": "null"}


class JsonToken(str, Enum):
    """Kinds of token returned by :meth:`JsonTokenReader.peek`."""

    BEGIN_OBJECT = "BEGIN_OBJECT"
    END_OBJECT = "END_OBJECT"
    BEGIN_ARRAY = "BEGIN_ARRAY"
    END_ARRAY = "END_ARRAY"
    NAME = "NAME"
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    END_DOCUMENT = "END_DOCUMENT"


class _Scope(Enum):
    EMPTY_DOCUMENT = 0
    NONEMPTY_DOCUMENT = 1
    EMPTY_ARRAY = 2
    NONEMPTY_ARRAY = 3
    EMPTY_OBJECT = 4
    DANGLING_NAME = 5
    NONEMPTY_OBJECT = 6


class JsonTokenReader:
    """Reads one JSON document from a text source, one token at a time.

    The source is consumed in chunks so memory stays bounded by the nesting depth
    and the longest single token. Syntax errors and premature end of input raise
    StreamError as soon as they are seen.
    """

    def __init__(
        self,
        source: TextIO | str,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._source = io.StringIO(source) if isinstance(source, str) else source
        self._max_depth = max_depth
        self._chunk_size = chunk_size
        self._buffer = ""
        self._pos = 0
        self._exhausted = False
        self._stack: list[_Scope] = [_Scope.EMPTY_DOCUMENT]
        self._peeked: tuple[JsonToken, object] | None = None

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def peek(self) -> JsonToken:
        if self._peeked is None:
            self._peeked = self._read_token()
        return self._peeked[0]

    def begin_object(self) -> None:
        self._consume(JsonToken.BEGIN_OBJECT)
        self._push(_Scope.EMPTY_OBJECT)

    def end_object(self) -> None:
        self._consume(JsonToken.END_OBJECT)
        self._stack.pop()

    def begin_array(self) -> None:
        self._consume(JsonToken.BEGIN_ARRAY)
        self._push(_Scope.EMPTY_ARRAY)

    def end_array(self) -> None:
        self._consume(JsonToken.END_ARRAY)
        self._stack.pop()

    def has_next(self) -> bool:
        """True while the current object or array has more members."""
        return self.peek() not in (
            JsonToken.END_OBJECT,
            JsonToken.END_ARRAY,
            JsonToken.END_DOCUMENT,
        )

    def next_name(self) -> str:
        return str(self._consume(JsonToken.NAME))

    def next_string(self) -> str:
        return str(self._consume(JsonToken.STRING))

    def next_number(self) -> str:
        """Return the raw literal of a JSON number so callers choose the target width."""
        return str(self._consume(JsonToken.NUMBER))

    def next_boolean(self) -> bool:
        return bool(self._consume(JsonToken.BOOLEAN))

    def next_null(self) -> None:
        self._consume(JsonToken.NULL)

    def skip_value(self) -> None:
        """Skip the next value, including any nested structure."""
        depth = 0
        while True:
            token = self.peek()
            if token is JsonToken.BEGIN_OBJECT:
                self.begin_object()
                depth += 1
            elif token is JsonToken.BEGIN_ARRAY:
                self.begin_array()
                depth += 1
            elif token is JsonToken.END_OBJECT:
                self.end_object()
                depth -= 1
            elif token is JsonToken.END_ARRAY:
                self.end_array()
                depth -= 1
            elif token is JsonToken.END_DOCUMENT:
                raise StreamError("Unexpected end of document while skipping a value.")
            else:
                self._consume(token)
            if depth == 0 and token is not JsonToken.NAME:
                return

    def expect_end(self) -> None:
        """Require that nothing but whitespace follows the document."""
        if self.peek() is not JsonToken.END_DOCUMENT:
            raise StreamError(f"Unexpected trailing content: {self.peek().value}.")

    # -- tokenizer -----------------------------------------------------------------

    def _consume(self, expected: JsonToken) -> object:
        token = self.peek()
        if token is not expected:
            raise StreamError(f"Expected {expected.value} but found {token.value}.")
        assert self._peeked is not None
        value = self._peeked[1]
        self._peeked = None
        return value

    def _push(self, scope: _Scope) -> None:
        if self.depth >= self._max_depth:
            raise StreamError(f"JSON nesting exceeds the maximum depth of {self._max_depth}.")
        self._stack.append(scope)

    def _read_token(self) -> tuple[JsonToken, object]:
        scope = self._stack[-1]
        if scope is _Scope.EMPTY_ARRAY:
            self._stack[-1] = _Scope.NONEMPTY_ARRAY
        elif scope is _Scope.NONEMPTY_ARRAY:
            char = self._next_non_whitespace("array")
            if char == "]":
                return JsonToken.END_ARRAY, None
            if char != ",":
                raise StreamError(f"Expected ',' or ']' in array but found {char!r}.")
        elif scope in (_Scope.EMPTY_OBJECT, _Scope.NONEMPTY_OBJECT):
            self._stack[-1] = _Scope.DANGLING_NAME
            if scope is _Scope.NONEMPTY_OBJECT:
                char = self._next_non_whitespace("object")
                if char == "}":
                    return JsonToken.END_OBJECT, None
                if char != ",":
                    raise StreamError(f"Expected ',' or '}}' in object but found {char!r}.")
            char = self._next_non_whitespace("object")
            if char == '"':
                return JsonToken.NAME, self._read_string()
            if char == "}" and scope is _Scope.EMPTY_OBJECT:
                return JsonToken.END_OBJECT, None
            raise StreamError(f"Expected an object key but found {char!r}.")
        elif scope is _Scope.DANGLING_NAME:
            self._stack[-1] = _Scope.NONEMPTY_OBJECT
            char = self._next_non_whitespace("object")
            if char != ":":
                raise StreamError(f"Expected ':' after object key but found {char!r}.")
        elif scope is _Scope.EMPTY_DOCUMENT:
            self._stack[-1] = _Scope.NONEMPTY_DOCUMENT
            if self._peek_char() is None:
                raise StreamError("Empty input: expected a JSON value.")
        else:
            char = self._peek_char()
            if char is None:
                return JsonToken.END_DOCUMENT, None
            raise StreamError(f"Unexpected trailing content starting with {char!r}.")

        char = self._next_non_whitespace("value")
        if char == "{":
            return JsonToken.BEGIN_OBJECT, None
        if char == "[":
            return JsonToken.BEGIN_ARRAY, None
        if char == "]" and scope is _Scope.EMPTY_ARRAY:
            return JsonToken.END_ARRAY, None
        if char == '"':
            return JsonToken.STRING, self._read_string()
        if char in _LITERALS:
            return self._read_literal(_LITERALS[char])
        if char == "-" or char.isdigit():
            return JsonToken.NUMBER, self._read_number()
        raise StreamError(f"Unexpected character {char!r} where a value was expected.")

    def _fill(self, minimum: int) -> bool:
        """Ensure at least ``minimum`` unread characters; False if input ends first."""
        while len(self._buffer) - self._pos < minimum:
            if self._exhausted:
                return False
            chunk = self._source.read(self._chunk_size)
            if not chunk:
                self._exhausted = True
                return False
            self._buffer = self._buffer[self._pos :] + chunk
            self._pos = 0
        return True

    def _peek_char(self) -> str | None:
        """Skip whitespace and return the next character without consuming it."""
        while True:
            if not self._fill(1):
                return None
            char = self._buffer[self._pos]
            if char not in _WHITESPACE:
                return char
            self._pos += 1

    def _next_non_whitespace(self, context: str) -> str:
        char = self._peek_char()
        if char is None:
            raise StreamError(f"Unterminated {context}: unexpected end of input.")
        self._pos += 1
        return char

    def _read_string(self) -> str:
        while True:
            try:
                value, end = scanstring(self._buffer, self._pos, True)
            except json.JSONDecodeError as exc:
                if self._fill(len(self._buffer) - self._pos + 1):
                    continue
                raise StreamError(f"Malformed string: {exc.msg}.") from exc
            self._pos = end
            return value

    def _read_number(self) -> str:
        # the leading character was already consumed by the caller
        self._pos -= 1
        end = self._pos
        while True:
            while end < len(self._buffer) and self._buffer[end] in _NUMBER_CHARS:
                end += 1
            if end < len(self._buffer):
                break
            offset = end - self._pos
            if not self._fill(offset + 1):
                break
            end = self._pos + offset
        literal = self._buffer[self._pos : end]
        if not _NUMBER_PATTERN.fullmatch(literal):
            raise StreamError(f"Malformed number: {literal!r}.")
        self._pos = end
        self._ensure_delimited("number")
        return literal

    def _read_literal(self, literal: str) -> tuple[JsonToken, object]:
        self._pos -= 1
        self._fill(len(literal))
        if not self._buffer.startswith(literal, self._pos):
            raise StreamError(f"Malformed literal, expected '{literal}'.")
        self._pos += len(literal)
        self._ensure_delimited(literal)
        if literal == "null":
            return JsonToken.NULL, None
        return JsonToken.BOOLEAN, literal == "true"

    def _ensure_delimited(self, context: str) -> None:
        if not self._fill(1):
            return
        char = self._buffer[self._pos]
        if char.isalnum() or char in ".-+":
            raise StreamError(f"Malformed {context}: unexpected {char!r}.")

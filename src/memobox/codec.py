"""JSON wire format shared by memo files, the index file and piped payloads.

The encoding mirrors the one the original toolbox wrote, so hashes and files
stay interchangeable:

- pipeline and index payloads are indented with tabs,
- memo files and hash input are compact and end with a newline,
- ``<``, ``>``, ``&``, U+2028 and U+2029 are written as ``\\uXXXX`` escapes.

Mapping keys are written in the order the caller built them; callers sort
set-like and hash-keyed mappings before encoding.
"""

from __future__ import annotations

import json
from typing import IO, Any, Protocol, Union, runtime_checkable

from memobox.errors import DecodeError, EncodeError

Source = Union[bytes, str, IO[bytes], IO[str]]

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@runtime_checkable
class Codec(Protocol):
    """Serialization strategy injected into the index and the query engine."""

    def dumps(self, value: Any) -> bytes:
        """Encode a value for piping or for the index file."""
        ...

    def dumps_line(self, value: Any) -> bytes:
        """Encode a value as a single newline-terminated record."""
        ...

    def loads(self, source: Source) -> Any:
        """Decode one value from bytes, text or a readable stream."""
        ...


def _escape(text: str) -> str:
    for raw, escaped in _HTML_ESCAPES.items():
        text = text.replace(raw, escaped)
    return text


class JsonCodec:
    """Default codec: JSON with tab indentation."""

    def __init__(self, indent: str = "\t") -> None:
        self.indent = indent

    def _encode(self, value: Any, **kwargs: Any) -> bytes:
        try:
            text = json.dumps(value, ensure_ascii=False, allow_nan=False, **kwargs)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"cannot encode {type(value).__name__}: {e}") from e
        return _escape(text).encode("utf-8")

    def dumps(self, value: Any) -> bytes:
        return self._encode(value, indent=self.indent)

    def dumps_line(self, value: Any) -> bytes:
        return self._encode(value, separators=(",", ":")) + b"\n"

    def loads(self, source: Source) -> Any:
        data = source.read() if hasattr(source, "read") else source
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"input is not valid UTF-8: {e}") from e
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            if not data.strip():
                raise DecodeError("unexpected end of input") from e
            raise DecodeError(str(e)) from e


JSON = JsonCodec()

"""Line splitting and JSON record decoding."""

from __future__ import annotations

import codecs
import json

from ..exceptions import RecordDecodeError
from ..models import Record


class LineSplitter:
    """Splits a chunked text stream into lines.

    Chunks may be ``str`` or ``bytes``; bytes are decoded incrementally as
    UTF-8, so a code point split across two chunks is decoded correctly.
    Lines end with ``\\n`` and an optional preceding ``\\r`` is stripped.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._tail = ""

    def feed(self, chunk: str | bytes) -> list[str]:
        """Add a chunk and return the lines it completed.

        Args:
            chunk: Text or UTF-8 bytes to append.

        Returns:
            The complete lines, without their terminators.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)

        *lines, self._tail = (self._tail + chunk).split("\n")
        return [line.removesuffix("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return the unterminated trailing text, if any, as a last line."""
        tail = self._tail + self._decoder.decode(b"", final=True)
        self._tail = ""
        tail = tail.removesuffix("\r")
        return [tail] if tail else []


class RecordParser:
    """Decodes a line of JSON into a record."""

    def parse(self, line: str) -> Record:
        """Decode a single line.

        Args:
            line: The line, without its terminator.

        Returns:
            The decoded record.

        Raises:
            RecordDecodeError: If the line is not a JSON object.
        """
        try:
            value = json.loads(line)
        except json.JSONDecodeError as e:
            raise RecordDecodeError(f"Failed to decode record: {e}", line) from e

        if not isinstance(value, dict):
            raise RecordDecodeError(
                f"Expected a JSON object, got {type(value).__name__}", line
            )
        return value

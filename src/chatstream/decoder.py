"""Reassembly of newline-delimited records from arbitrary byte chunks.

Chunk boundaries carry no meaning: a record, its ``data: `` prefix, or a
single multi-byte character may be split anywhere. The decoder keeps the
unterminated tail as raw bytes and only decodes text once a newline has
closed it off. A newline byte never occurs inside a UTF-8 multi-byte
sequence, so cutting at the last newline can never split a character.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

NEWLINE = b"\n"
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class RecordBuffer:
    """Growable byte buffer owned by a single session."""

    def __init__(self) -> None:
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def extend(self, chunk: bytes) -> None:
        self._data.extend(chunk)

    def rfind(self, sep: bytes, start: int = 0) -> int:
        return self._data.rfind(sep, start)

    def take(self, end: int | None = None) -> bytes:
        """Remove and return the first *end* bytes (all bytes by default)."""
        if end is None:
            end = len(self._data)
        taken = bytes(self._data[:end])
        del self._data[:end]
        return taken

    def clear(self) -> None:
        self._data = bytearray()


@dataclass
class DecodeResult:
    """Outcome of feeding one chunk.

    ``done`` is set when the sentinel was seen; the caller must stop
    reading. ``skipped`` counts records that were not valid JSON.
    """

    records: list[Any] = field(default_factory=list)
    done: bool = False
    skipped: int = 0


class RecordDecoder:
    """Turns a stream of byte chunks into parsed JSON records.

    Args:
        prefix: Literal line prefix stripped from each record when present.
        sentinel: Record value that terminates the stream.
    """

    def __init__(
        self,
        prefix: str = DATA_PREFIX,
        sentinel: str = DONE_SENTINEL,
    ):
        self.prefix = prefix
        self.sentinel = sentinel
        self._buffer = RecordBuffer()

    @property
    def pending(self) -> bytes:
        """Bytes received after the last newline, not yet decoded."""
        return bytes(self._buffer)

    def reset(self) -> None:
        self._buffer.clear()

    def feed(self, chunk: bytes) -> DecodeResult:
        result = DecodeResult()
        start = len(self._buffer)
        self._buffer.extend(chunk)

        # Only the freshly appended bytes can hold a new line break.
        cut = self._buffer.rfind(NEWLINE, start)
        if cut == -1:
            return result

        text = self._buffer.take(cut + 1).decode("utf-8", errors="replace")
        for fragment in text.split("\n"):
            if not fragment.strip():
                continue
            record = fragment.removesuffix("\r").removeprefix(self.prefix)

            if record == self.sentinel:
                self._buffer.clear()
                result.done = True
                return result

            try:
                result.records.append(json.loads(record))
            except (ValueError, RecursionError) as e:
                logger.debug(f"Skipping malformed record {record[:80]!r}: {e}")
                result.skipped += 1
        return result

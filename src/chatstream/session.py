from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import httpx

from chatstream.decoder import RecordDecoder
from chatstream.state import SessionState

logger = logging.getLogger(__name__)


@runtime_checkable
class ByteSource(Protocol):
    """Pull-based reader over a response body."""

    async def read(self) -> bytes | None:
        """Return the next chunk, or ``None`` once the body is exhausted."""

    async def cancel(self) -> None:
        """Stop reading and release the underlying connection."""


class ResponseByteSource:
    """Reads raw chunks from a streaming :class:`httpx.Response`."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self._chunks = response.aiter_bytes()

    async def read(self) -> bytes | None:
        try:
            return await anext(self._chunks)
        except StopAsyncIteration:
            return None

    async def cancel(self) -> None:
        await self.response.aclose()


@dataclass
class StreamSession:
    """State of one in-flight streaming request.

    The session exclusively owns its decoder buffer and, while open, its
    byte source. ``release()`` gives both up; it is safe to call more
    than once.
    """

    decoder: RecordDecoder = field(default_factory=RecordDecoder)
    state: SessionState = SessionState.IDLE
    source: ByteSource | None = None
    records: int = 0
    skipped: int = 0

    @property
    def is_open(self) -> bool:
        return self.source is not None

    def attach(self, source: ByteSource) -> None:
        self.source = source
        self.state = SessionState.STREAMING

    async def release(self) -> None:
        source, self.source = self.source, None
        self.decoder.reset()
        if source is None:
            return
        try:
            await source.cancel()
        except Exception as e:
            logger.warning(f"Failed to cancel byte source: {e}")

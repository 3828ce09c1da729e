import json
from collections.abc import Iterable

import httpx
import pytest

from chatstream.events import DataEvent, StreamEvent
from chatstream.stream import ChatCompletionStream

URL = "https://llm.test/v1/chat/completions"


# ---------------------------------------------------------------------------
# Response body helpers
# ---------------------------------------------------------------------------

def split_at(body: bytes, *positions: int) -> list[bytes]:
    """Cut *body* into chunks at the given byte offsets."""
    bounds = [0, *positions, len(body)]
    return [body[a:b] for a, b in zip(bounds, bounds[1:])]


async def body_of(chunks: Iterable[bytes], error: Exception | None = None):
    """Async byte body yielding *chunks*, then optionally failing."""
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


def streaming_response(
    chunks: Iterable[bytes], status_code: int = 200,
    error: Exception | None = None,
) -> httpx.Response:
    return httpx.Response(status_code, content=body_of(chunks, error))


# ---------------------------------------------------------------------------
# Recording fakes
# ---------------------------------------------------------------------------

class Recorder:
    """Listener that records every published event."""

    def __init__(self):
        self.events: list[StreamEvent] = []

    def __call__(self, event: StreamEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [type(e).__name__ for e in self.events]

    @property
    def data(self) -> list:
        return [e.data for e in self.events if isinstance(e, DataEvent)]


class MockEndpoint:
    """Chat-completion endpoint answering with pre-queued responses."""

    def __init__(self):
        self.responses: list = []
        self.requests: list[httpx.Request] = []

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response()
        return response


class FakeByteSource:
    def __init__(self, cancel_error: Exception | None = None):
        self.cancel_error = cancel_error
        self.cancelled = 0

    async def read(self):
        return None

    async def cancel(self):
        self.cancelled += 1
        if self.cancel_error is not None:
            raise self.cancel_error


@pytest.fixture
def endpoint():
    return MockEndpoint()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_stream(endpoint, recorder):
    """Factory for streams wired to the mock endpoint and recorder."""
    def _make(url=URL):
        client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        stream = ChatCompletionStream(url, client=client)
        stream.subscribe(recorder)
        return stream
    return _make

"""HTTP driver for streaming chat completions.

:class:`ChatCompletionStream` posts one request, pulls the response body
chunk by chunk, and hands each chunk to a :class:`RecordDecoder`. Every
parsed record becomes a :class:`DataEvent`; the session then finishes
with exactly one :class:`EndEvent` or :class:`ErrorEvent`.

``fetch()`` drains ``iter()`` and publishes to subscribed listeners.
``iter()`` is the streaming entry point.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel

from chatstream.config import DEFAULT_MODEL, DEFAULT_TEMPERATURE, StreamConfig
from chatstream.errors import EmptyBodyError, ResponseStatusError
from chatstream.events import DataEvent, EndEvent, ErrorEvent, StreamEvent
from chatstream.functions import Function
from chatstream.instrumentation import record_error, record_records, stream_span
from chatstream.message import clean_messages
from chatstream.session import ResponseByteSource, StreamSession
from chatstream.state import SessionState

logger = logging.getLogger(__name__)

Listener = Callable[[StreamEvent], None]

NO_BODY_STATUS_CODES = frozenset({204, 205})


class FetchParams(BaseModel):
    """Parameters of a single streaming request.

    Args:
        messages: ``Message`` objects or mappings; reduced to ``content``,
            ``role``, ``name`` and ``function_call`` before sending.
        model: Overrides the configured model.
        functions: ``Function`` objects or raw descriptor mappings.
        temperature: Sampling temperature. ``None`` and ``0`` both fall
            back to 0.5.
        max_tokens: Completion length cap. Not part of the basic request
            shape; added to the body only when given.
        headers: Extra request headers, applied after the content type.
        body: Extra body fields, merged last so they can override anything.
    """

    messages: list[Any]
    model: str | None = None
    functions: list[Any] | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    headers: dict[str, str] | None = None
    body: dict[str, Any] | None = None


def _dump_function(func: Function | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(func, Function):
        return func.model_dump(exclude_none=True)
    return dict(func)


def build_payload(
        params: FetchParams,
        default_model: str = DEFAULT_MODEL,
) -> dict[str, Any]:
    functions = [_dump_function(f) for f in params.functions or []]
    payload: dict[str, Any] = {
        "model": params.model or default_model,
        "messages": clean_messages(params.messages),
        "stream": True,
    }
    if functions:
        payload["functions"] = functions
    # A temperature of 0 counts as unset.
    payload["temperature"] = params.temperature or DEFAULT_TEMPERATURE
    if params.max_tokens is not None:
        payload["max_tokens"] = params.max_tokens
    if functions:
        payload["function_call"] = "auto"
    if params.body:
        payload.update(params.body)
    return payload


def build_headers(params: FetchParams) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        **(params.headers or {}),
    }


async def _read_error_detail(response: httpx.Response) -> str:
    try:
        await response.aread()
        return response.text
    except Exception as e:
        logger.debug(f"Could not read error body: {e}")
        return response.reason_phrase


class ChatCompletionStream:
    """Streams chat-completion deltas from a single endpoint.

    At most one session is open at a time: starting a new request
    releases the previous one first, and a superseded session never
    emits again.

    Args:
        config: A :class:`StreamConfig`, or the endpoint URL. Read from
            the environment when omitted.
        client: An ``httpx.AsyncClient`` to send requests with. When
            omitted the stream creates and owns one.
    """

    def __init__(
        self,
        config: StreamConfig | str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if isinstance(config, str):
            config = StreamConfig(url=config)
        elif config is None:
            config = StreamConfig.from_env()
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.timeout)
        self._listeners: list[Listener] = []
        self._session: StreamSession | None = None

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.IDLE
        return self._session.state

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for published events.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: StreamEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Listener {listener!r} failed on {type(event).__name__}"
                )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def fetch(self, params: FetchParams | None = None, **kwargs) -> None:
        """Run one request, publishing its events to every listener."""
        async for event in self.iter(params, **kwargs):
            self._publish(event)

    async def iter(
        self, params: FetchParams | None = None, **kwargs,
    ) -> AsyncIterator[StreamEvent]:
        """Run one request, yielding its events as they are decoded."""
        session = await self._start_session()
        try:
            if params is None:
                params = FetchParams(**kwargs)
            payload = build_payload(params, self.config.model)
            request = self.client.build_request(
                "POST", self.config.url,
                json=payload, headers=build_headers(params),
            )
        except Exception as e:
            logger.warning(f"Could not build request: {e}")
            event = await self._finish(session, ErrorEvent(error=e))
            if event is not None:
                yield event
            return

        async with stream_span(self.config.url, payload["model"]) as span:
            try:
                async for event in self._stream(session, request, span):
                    yield event
            finally:
                if session is self._session and session.is_open:
                    await session.release()

    async def close(self) -> None:
        """Release the current session and any client this stream owns."""
        session, self._session = self._session, None
        if session is not None:
            await session.release()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> ChatCompletionStream:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def _start_session(self) -> StreamSession:
        # Swap before awaiting so the old session is superseded at once.
        previous, self._session = self._session, StreamSession()
        session = self._session
        if previous is not None:
            await previous.release()
        session.state = SessionState.REQUESTING
        return session

    async def _finish(
        self, session: StreamSession, event: StreamEvent, span=None,
    ) -> StreamEvent | None:
        """Release *session* and return its terminal event.

        Returns ``None`` when the session was superseded or has already
        finished, in which case nothing may be emitted.
        """
        await session.release()
        if session is not self._session or session.state.is_terminal:
            return None
        record_records(span, session.records, session.skipped)
        if isinstance(event, ErrorEvent):
            session.state = SessionState.ERRORED
            record_error(span, event.error)
            logger.warning(f"Stream failed: {event.error}")
        else:
            session.state = SessionState.ENDED
            logger.info(
                f"Stream ended after {session.records} records "
                f"({session.skipped} skipped)"
            )
        return event

    async def _stream(
        self, session: StreamSession, request: httpx.Request, span,
    ) -> AsyncIterator[StreamEvent]:
        logger.info(f"Requesting {request.url}")
        try:
            response = await self.client.send(request, stream=True)
        except Exception as e:
            event = await self._finish(session, ErrorEvent(error=e), span)
            if event is not None:
                yield event
            return

        if session is not self._session:
            await response.aclose()
            return

        if not response.is_success:
            detail = await _read_error_detail(response)
            await response.aclose()
            error = ResponseStatusError(response.status_code, detail)
            event = await self._finish(session, ErrorEvent(error=error), span)
            if event is not None:
                yield event
            return

        if response.status_code in NO_BODY_STATUS_CODES:
            await response.aclose()
            event = await self._finish(
                session, ErrorEvent(error=EmptyBodyError()), span,
            )
            if event is not None:
                yield event
            return

        session.attach(ResponseByteSource(response))
        while True:
            try:
                chunk = await session.source.read()
            except Exception as e:
                event = await self._finish(session, ErrorEvent(error=e), span)
                if event is not None:
                    yield event
                return

            if session is not self._session:
                return

            if chunk is None:
                if session.decoder.pending:
                    logger.debug(
                        f"Discarding unterminated tail "
                        f"{session.decoder.pending!r}"
                    )
                event = await self._finish(session, EndEvent(), span)
                if event is not None:
                    yield event
                return

            try:
                result = session.decoder.feed(chunk)
            except Exception as e:
                event = await self._finish(session, ErrorEvent(error=e), span)
                if event is not None:
                    yield event
                return
            session.skipped += result.skipped
            for record in result.records:
                session.records += 1
                yield DataEvent(data=record)
                if session is not self._session:
                    return

            if result.done:
                event = await self._finish(session, EndEvent(), span)
                if event is not None:
                    yield event
                return

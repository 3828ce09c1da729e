"""Events published by a chat-completion stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class StreamEvent:
    """Base for all stream events."""

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass
class DataEvent(StreamEvent):
    """One parsed record from the response body.

    ``data`` is whatever JSON value the record held; it is not validated.
    """

    data: Any = None


@dataclass
class EndEvent(StreamEvent):
    """Terminal event: the sentinel arrived or the body ended."""

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass
class ErrorEvent(StreamEvent):
    """Terminal event: the session failed and was torn down."""

    error: BaseException | None = None

    @property
    def is_terminal(self) -> bool:
        return True

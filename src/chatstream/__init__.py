from chatstream.config import StreamConfig
from chatstream.decoder import DecodeResult, RecordDecoder
from chatstream.errors import (
    ChatStreamError,
    ConfigurationError,
    EmptyBodyError,
    ResponseStatusError,
)
from chatstream.events import DataEvent, EndEvent, ErrorEvent, StreamEvent
from chatstream.functions import Function, function
from chatstream.instrumentation import instrument, uninstrument
from chatstream.message import FunctionCall, Message, MessageRole
from chatstream.state import SessionState
from chatstream.stream import ChatCompletionStream, FetchParams

__all__ = [
    "ChatCompletionStream",
    "ChatStreamError",
    "ConfigurationError",
    "DataEvent",
    "DecodeResult",
    "EmptyBodyError",
    "EndEvent",
    "ErrorEvent",
    "FetchParams",
    "Function",
    "FunctionCall",
    "Message",
    "MessageRole",
    "RecordDecoder",
    "ResponseStatusError",
    "SessionState",
    "StreamConfig",
    "StreamEvent",
    "function",
    "instrument",
    "uninstrument",
]

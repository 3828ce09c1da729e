class ChatStreamError(Exception):
    """Base class for errors raised or reported by chatstream."""


class ConfigurationError(ChatStreamError):
    """The stream was constructed without a usable configuration."""


class ResponseStatusError(ChatStreamError):
    """The endpoint answered with a non-success status.

    ``detail`` is the response text, or the reason phrase when the body
    could not be read.
    """

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Error {status_code}: {detail}")


class EmptyBodyError(ChatStreamError):
    """The endpoint answered with success but without a body."""

    def __init__(self, message: str = "Response body is null"):
        super().__init__(message)

import os

from pydantic import BaseModel

from chatstream.errors import ConfigurationError

DEFAULT_MODEL = "gpt-4-1106-preview"
DEFAULT_TEMPERATURE = 0.5


class StreamConfig(BaseModel):
    """Settings fixed for the lifetime of a :class:`ChatCompletionStream`.

    Args:
        url: The chat-completion endpoint every request is posted to.
        model: Model used when a request does not name one.
        timeout: httpx timeout in seconds for an owned client; ``None``
            disables it.
    """

    url: str
    model: str = DEFAULT_MODEL
    timeout: float | None = 600.0

    @classmethod
    def from_env(cls, **overrides) -> "StreamConfig":
        """Build a config, filling gaps from ``CHATSTREAM_*`` variables."""
        url = overrides.pop("url", None) or os.getenv("CHATSTREAM_URL")
        if not url:
            raise ConfigurationError(
                "No endpoint configured. Pass url= or set CHATSTREAM_URL."
            )
        model = (
            overrides.pop("model", None)
            or os.getenv("CHATSTREAM_MODEL")
            or DEFAULT_MODEL
        )
        return cls(url=url, model=model, **overrides)

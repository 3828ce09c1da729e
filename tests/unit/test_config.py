from unittest.mock import patch

import pytest

from chatstream.config import DEFAULT_MODEL, StreamConfig
from chatstream.errors import ConfigurationError
from chatstream.log import DATE_FORMAT, LOG_FORMAT, configure_logging
from chatstream.stream import ChatCompletionStream


def test_from_env_reads_url_and_model(monkeypatch):
    monkeypatch.setenv("CHATSTREAM_URL", "http://localhost:8000/v1/chat/completions")
    monkeypatch.setenv("CHATSTREAM_MODEL", "Qwen/Qwen3-8B")
    config = StreamConfig.from_env()
    assert config.url == "http://localhost:8000/v1/chat/completions"
    assert config.model == "Qwen/Qwen3-8B"


def test_from_env_overrides_win(monkeypatch):
    monkeypatch.setenv("CHATSTREAM_URL", "http://env")
    config = StreamConfig.from_env(url="http://arg", timeout=5.0)
    assert config.url == "http://arg"
    assert config.model == DEFAULT_MODEL
    assert config.timeout == 5.0


def test_from_env_without_url_raises(monkeypatch):
    monkeypatch.delenv("CHATSTREAM_URL", raising=False)
    with pytest.raises(ConfigurationError, match="CHATSTREAM_URL"):
        StreamConfig.from_env()


def test_stream_accepts_plain_url():
    stream = ChatCompletionStream("http://llm.test/chat")
    assert stream.config == StreamConfig(url="http://llm.test/chat")


def test_stream_reads_env_when_unconfigured(monkeypatch):
    monkeypatch.setenv("CHATSTREAM_URL", "http://env/chat")
    stream = ChatCompletionStream()
    assert stream.config.url == "http://env/chat"


def test_configure_logging_uses_house_format(tmp_path):
    log_file = tmp_path / "chatstream.log"
    with patch("logging.basicConfig") as basic_config:
        configure_logging("DEBUG", log_file=str(log_file))

    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == "DEBUG"
    assert kwargs["format"] == LOG_FORMAT
    assert kwargs["datefmt"] == DATE_FORMAT
    assert len(kwargs["handlers"]) == 2
    for handler in kwargs["handlers"]:
        handler.close()

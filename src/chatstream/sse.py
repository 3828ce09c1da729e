"""Encoder for the ``data: ...`` record format the decoder reads."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from chatstream.decoder import DATA_PREFIX, DONE_SENTINEL


def encode_record(payload: Any) -> bytes:
    """Encode one JSON payload as a ``data:`` line."""
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n".encode()


def encode_done() -> bytes:
    return f"{DATA_PREFIX}{DONE_SENTINEL}\n".encode()


def encode_stream(payloads: Iterable[Any], done: bool = True) -> bytes:
    """Encode a whole response body, terminated by the sentinel if *done*."""
    body = b"".join(encode_record(p) for p in payloads)
    if done:
        body += encode_done()
    return body

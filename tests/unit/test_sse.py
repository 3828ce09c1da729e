from chatstream.sse import encode_done, encode_record, encode_stream


def test_encode_record_keeps_unicode():
    assert encode_record({"t": "é"}) == 'data: {"t": "é"}\n'.encode()


def test_encode_done():
    assert encode_done() == b"data: [DONE]\n"


def test_encode_stream_without_sentinel():
    assert encode_stream([1, 2], done=False) == b"data: 1\ndata: 2\n"

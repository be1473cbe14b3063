from app.services.llm.streaming import (
    UpstreamStream,
    format_sse,
    iter_sse_data,
    iter_sse_lines,
)

from conftest import FakeResponse


def test_format_sse_keeps_unicode():
    assert format_sse({"content": "café"}) == 'data: {"content": "café"}\n\n'.encode("utf-8")


def test_lines_split_across_chunks():
    chunks = [b"data: one\nda", b"ta: two\r\n", b"data: three"]
    assert list(iter_sse_lines(chunks)) == ["data: one", "data: two", "data: three"]


def test_multibyte_character_split_across_chunks():
    encoded = 'data: {"content": "é"}\n'.encode("utf-8")
    split = encoded.index(b"\xc3") + 1
    assert list(iter_sse_data([encoded[:split], encoded[split:]])) == ['{"content": "é"}']


def test_malformed_utf8_is_replaced():
    assert list(iter_sse_lines([b"data: \xff\n", b"data: ok\n"])) == ["data: \ufffd", "data: ok"]


def test_truncated_multibyte_at_end_is_replaced():
    assert list(iter_sse_lines([b"data: \xc3"])) == ["data: \ufffd"]


def test_non_data_lines_are_ignored():
    chunks = [b": keep-alive\n\nevent: message\ndata:  payload \n\n"]
    assert list(iter_sse_data(chunks)) == ["payload"]


def test_upstream_stream_closes_after_iteration():
    response = FakeResponse(200)
    stream = UpstreamStream(response, iter([b"a", b"b"]))

    assert list(stream) == [b"a", b"b"]
    assert response.closed is True


def test_upstream_stream_close_without_iterating():
    response = FakeResponse(200)
    stream = UpstreamStream(response, iter([b"a"]))

    stream.close()

    assert response.closed is True


def test_upstream_stream_closes_when_abandoned_midway():
    response = FakeResponse(200)
    iterator = iter(UpstreamStream(response, iter([b"a", b"b"])))

    assert next(iterator) == b"a"
    iterator.close()

    assert response.closed is True

"""
Server-Sent-Events helpers.

Only trivial line splitting: no buffering strategy, no reconnection. OpenAI
streams are passed through untouched; Gemini streams are re-emitted as
`data: {"content": ...}` lines so clients read one shape from both providers.
"""
import codecs
import json
import logging
from typing import Iterable, Iterator, Union

import requests

logger = logging.getLogger(__name__)

DONE_EVENT = b"data: [DONE]\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse(payload: dict) -> bytes:
    """Render one SSE data event."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def iter_sse_lines(chunks: Iterable[Union[bytes, str]]) -> Iterator[str]:
    """Split a stream of byte/str chunks into text lines. Malformed UTF-8 is replaced, not raised."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    for chunk in chunks:
        if isinstance(chunk, bytes):
            chunk = decoder.decode(chunk)
        buffer += chunk
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            yield line.rstrip("\r")
    buffer += decoder.decode(b"", final=True)
    if buffer:
        yield buffer.rstrip("\r")


def iter_sse_data(chunks: Iterable[Union[bytes, str]]) -> Iterator[str]:
    """Yield the payload of every `data:` line."""
    for line in iter_sse_lines(chunks):
        if line.startswith("data:"):
            yield line[5:].strip()


class UpstreamStream:
    """
    SSE body bound to the upstream response it reads from.

    The response is released when iteration ends or when close() is called,
    whichever comes first. close() also works when iteration never started.
    """

    def __init__(self, response: requests.Response, chunks: Iterator[bytes]):
        self.response = response
        self._chunks = chunks

    def __iter__(self) -> Iterator[bytes]:
        try:
            yield from self._chunks
        finally:
            self.close()

    def close(self) -> None:
        self.response.close()

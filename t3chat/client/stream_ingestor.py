"""Reassembly of content fragments from a text/event-stream body."""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator

from t3chat.schemas.chat_schema import DATA_PREFIX, DONE_SENTINEL


class SSEFragmentParser:
    """Incremental parser turning raw byte chunks into content fragments.

    Bytes are decoded with a streaming UTF-8 decoder so a character split
    across chunks is held back until complete. Only newline-terminated lines
    are examined; the unterminated tail waits for the next chunk.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self.done = False

    def feed(self, chunk: bytes) -> list[str]:
        """Consume one chunk and return the fragments it completes."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        fragments: list[str] = []
        for line in lines:
            if self.done:
                break
            fragment = self._parse_line(line)
            if fragment:
                fragments.append(fragment)
        return fragments

    def _parse_line(self, line: str) -> str | None:
        if not line.startswith(DATA_PREFIX):
            return None
        data = line[len(DATA_PREFIX):].strip()
        if data == DONE_SENTINEL:
            self.done = True
            return None
        try:
            parsed = json.loads(data)
        except ValueError:
            # A frame cut at a chunk boundary; the next line recovers.
            return None
        if not isinstance(parsed, dict):
            return None
        content = parsed.get("content")
        if isinstance(content, str) and content:
            return content
        return None


async def iter_fragments(byte_chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Yield content fragments in arrival order.

    After the ``[DONE]`` sentinel no more fragments are produced, but the
    source is still drained until it ends. Errors raised by the source
    propagate to the caller.
    """
    parser = SSEFragmentParser()
    async for chunk in byte_chunks:
        for fragment in parser.feed(chunk):
            yield fragment

"""Line-oriented reading of Docker engine feeds."""

from typing import Iterable, Iterator, Optional, Union

import requests
import structlog
import urllib3

from ...models.errors import FeedReadError

logger = structlog.get_logger(__name__)

Chunk = Union[bytes, str]

# Transport failures that can surface while a streamed response is being read
FEED_ERRORS = (
    requests.exceptions.RequestException,
    urllib3.exceptions.HTTPError,
    OSError,
)


class LogStream:
    """Lazy sequence of text lines read from an engine byte feed.

    The feed is only read as the stream is iterated. A stream over a
    following feed (container logs) ends only when the engine closes the
    feed, so iterating it can block indefinitely. Whoever holds the stream
    is responsible for calling close().
    """

    def __init__(self, feed: Iterable[Chunk], source: str = "feed", encoding: str = "utf-8"):
        self._feed = feed
        self._lines: Optional[Iterator[str]] = None
        self._closed = False
        self.source = source
        self.encoding = encoding
        self.lines_read = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "LogStream":
        return self

    def __next__(self) -> str:
        if self._closed:
            raise ValueError(f"I/O operation on closed stream ({self.source})")
        if self._lines is None:
            self._lines = self._read_lines()
        line = next(self._lines)
        self.lines_read += 1
        return line

    def _decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors="replace")

    def _read_lines(self) -> Iterator[str]:
        """Split the feed on newlines, carrying partial lines between chunks."""
        buffer = b""
        chunks = iter(self._feed)
        while True:
            try:
                chunk = next(chunks)
            except StopIteration:
                break
            except FEED_ERRORS as e:
                logger.error(f"Failed to read {self.source}: {e}")
                raise FeedReadError(f"Failed to read {self.source}: {e}") from e

            if isinstance(chunk, str):
                chunk = chunk.encode(self.encoding)
            buffer += chunk

            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                yield self._decode(line.rstrip(b"\r"))

        if buffer:
            yield self._decode(buffer.rstrip(b"\r"))

    def close(self) -> None:
        """Release the underlying feed."""
        if self._closed:
            return
        self._closed = True

        if self._lines is not None:
            self._lines.close()

        close = getattr(self._feed, "close", None)
        if close is not None:
            close()
        logger.debug(f"Closed {self.source} after {self.lines_read} lines")

    def __enter__(self) -> "LogStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<LogStream {self.source} {state} lines_read={self.lines_read}>"

"""
MODULE OVERVIEW:
The incremental event-stream decoder for the chat response body.

WHAT IS HAPPENING HERE:
The network hands us bytes in whatever chunking it likes. A single fragment can end in
the middle of a block, in the middle of a line, or even in the middle of a multi-byte
UTF-8 character. So we keep two buffers between fragments:
  1. an incremental UTF-8 decoder that holds back undecoded trailing bytes,
  2. a text buffer holding everything after the last blank-line delimiter.

Each complete block (text ending in "\\n\\n") is split into lines:
    event: <name>   -> sets the event type for the rest of this block
    data: <text>    -> one frame carrying <text> verbatim
An `error` frame stops everything. Nothing after it is decoded or read.
"""
import codecs
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Union

from loguru import logger

BLOCK_DELIMITER = "\n\n"
EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "
DEFAULT_EVENT_TYPE = "message"
ERROR_EVENT_TYPE = "error"


@dataclass(frozen=True)
class StreamFrame:
    """One parsed `data:` line together with the event type active for it."""
    payload: str
    event_type: str = DEFAULT_EVENT_TYPE


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class StreamError:
    message: str


StreamEvent = Union[TextDelta, StreamError]


def parse_block(block: str) -> list[StreamFrame]:
    """
    Turns one complete block into its frames, in textual order.
    Lines that are neither `event: ` nor `data: ` (comments, pings, ids) are skipped.
    """
    frames = []
    event_type = DEFAULT_EVENT_TYPE
    for line in block.split("\n"):
        if line.startswith(EVENT_PREFIX):
            event_type = line[len(EVENT_PREFIX):].strip() or DEFAULT_EVENT_TYPE
        elif line.startswith(DATA_PREFIX):
            frames.append(StreamFrame(payload=line[len(DATA_PREFIX):], event_type=event_type))
    return frames


def frame_to_event(frame: StreamFrame) -> StreamEvent:
    if frame.event_type == ERROR_EVENT_TYPE:
        return StreamError(frame.payload)
    return TextDelta(frame.payload)


class StreamDecoder:
    """
    Decoder state for exactly one chat response. Never reuse it across responses.

    `feed()` is pure bookkeeping (no I/O), which is what makes the fragmentation
    behaviour easy to test. `iter_events()` wires it to an async byte source.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self.aborted = False

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, fragment: bytes) -> list[StreamEvent]:
        """
        Consumes one fragment and returns every event completed by it.
        If an error frame shows up, it is the last event returned and the decoder
        refuses any further input.
        """
        if self.aborted:
            return []

        self._buffer += self._decoder.decode(fragment)
        *blocks, self._buffer = self._buffer.split(BLOCK_DELIMITER)

        events: list[StreamEvent] = []
        for block in blocks:
            for frame in parse_block(block):
                event = frame_to_event(frame)
                events.append(event)
                if isinstance(event, StreamError):
                    self._abort()
                    return events
        return events

    def finish(self) -> None:
        """
        Called on end-of-stream. A trailing block that never got its blank-line
        terminator is dropped on purpose.
        """
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if tail:
            logger.debug(f"Discarding unterminated trailing block ({len(tail)} chars)")

    def _abort(self) -> None:
        self.aborted = True
        self._buffer = ""
        self._decoder.reset()

    async def iter_events(self, fragments: AsyncIterable[bytes]) -> AsyncIterator[StreamEvent]:
        """
        Lazily decodes an async byte source, e.g. `response.aiter_bytes()`.
        Stops pulling fragments as soon as an error event has been yielded.
        """
        async for fragment in fragments:
            for event in self.feed(fragment):
                yield event
            if self.aborted:
                return
        self.finish()

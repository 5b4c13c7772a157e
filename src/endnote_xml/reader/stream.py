"""Streaming decode controller.

``parse`` accepts a bytes buffer, a text string or a readable stream and
returns a DecodeStream: a lazy, single-use sequence of tagged events.

    >>> for event in parse(data):
    ...     if isinstance(event, RefEvent):
    ...         print(event.reference.title)

Listeners can be attached instead, in the style of an event emitter:

    >>> parse(data).on("ref", refs.append).on("end", done).run()

Nothing is read or parsed until iteration starts.
"""

import codecs
import io
from collections import defaultdict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

from endnote_xml.audit import AuditLogger
from endnote_xml.config import DecodeOptions
from endnote_xml.errors import (
    EndNoteXMLError,
    InputShapeError,
    MalformedXMLError,
    StructureError,
    UnknownTypeError,
)
from endnote_xml.models import Reference
from endnote_xml.reader.assembler import (
    AssemblyError,
    AssemblyEvent,
    Finished,
    Fragment,
    RecordAssembler,
)
from endnote_xml.reader.decoder import decode_record
from endnote_xml.reader.tokenizer import Tokenizer
from endnote_xml.utils import probe_stream_size

__all__ = [
    "RefEvent",
    "ProgressEvent",
    "ErrorEvent",
    "EndEvent",
    "DecodeEvent",
    "BufferSource",
    "TextSource",
    "StreamSource",
    "Source",
    "open_source",
    "DecodeStream",
    "parse",
]

STAGE = "decode"


@dataclass(frozen=True)
class RefEvent:
    """One decoded reference."""

    kind: ClassVar[str] = "ref"
    reference: Reference


@dataclass(frozen=True)
class ProgressEvent:
    """Bytes consumed so far and total size (None when unknown)."""

    kind: ClassVar[str] = "progress"
    offset: int
    total: int | None


@dataclass(frozen=True)
class ErrorEvent:
    """A decode failure; no EndEvent follows."""

    kind: ClassVar[str] = "error"
    error: EndNoteXMLError


@dataclass(frozen=True)
class EndEvent:
    """Decoding completed without error."""

    kind: ClassVar[str] = "end"


DecodeEvent: TypeAlias = RefEvent | ProgressEvent | ErrorEvent | EndEvent

_EVENT_KINDS = frozenset({"ref", "progress", "error", "end"})


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class BufferSource:
    """In-memory bytes; the document declares its own encoding.

    Sources yield ``(consumed, data)`` pairs: ``consumed`` counts input
    bytes for progress and ``data`` is what the tokenizer receives.
    """

    encoding: str | None = None

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.total: int | None = len(data)

    def chunks(self, size: int) -> Iterator[tuple[int, bytes]]:
        for start in range(0, len(self.data), size):
            chunk = self.data[start : start + size]
            yield len(chunk), chunk


class TextSource(BufferSource):
    """A text string, encoded to UTF-8 once; offsets are in bytes."""

    encoding = "utf-8"

    def __init__(self, text: str) -> None:
        super().__init__(text.encode("utf-8"))


class StreamSource:
    """A readable stream; size is probed before reading starts.

    Text-mode files are read through their binary buffer and decoded with
    the file's encoding, so offsets count the same bytes as the probed size.
    Text streams without a buffer report no total.
    """

    def __init__(self, stream: Any) -> None:
        self.encoding: str | None = None
        self.total: int | None = None
        self._decoder: codecs.IncrementalDecoder | None = None
        if isinstance(stream, io.TextIOBase):
            self.encoding = "utf-8"
            buffer = getattr(stream, "buffer", None)
            if buffer is None:
                self.stream = stream
                return
            self._decoder = codecs.getincrementaldecoder(stream.encoding)()
            stream = buffer
        self.stream = stream
        self.total = probe_stream_size(stream)

    def chunks(self, size: int) -> Iterator[tuple[int, bytes]]:
        while True:
            chunk = self.stream.read(size)
            if not chunk:
                break
            if isinstance(chunk, str):
                self.encoding = "utf-8"
                data = chunk.encode("utf-8")
                yield len(data), data
            elif self._decoder is not None:
                yield len(chunk), self._decoder.decode(chunk).encode("utf-8")
            else:
                yield len(chunk), bytes(chunk)

        if self._decoder is not None:
            tail = self._decoder.decode(b"", final=True)
            if tail:
                yield 0, tail.encode("utf-8")


Source: TypeAlias = BufferSource | TextSource | StreamSource


def open_source(source: Any) -> Source:
    """Classify a decode input.

    Parameters
    ----------
    source : Any
        bytes, bytearray, memoryview, str, or an object with ``read()``.

    Returns
    -------
    Source
        Matching source wrapper.

    Raises
    ------
    InputShapeError
        If the input is none of the supported kinds.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BufferSource(bytes(source))
    if isinstance(source, str):
        return TextSource(source)
    if callable(getattr(source, "read", None)):
        return StreamSource(source)
    raise InputShapeError(f"Unknown input type for parse(): {type(source).__name__}")


# ---------------------------------------------------------------------------
# Decode stream
# ---------------------------------------------------------------------------


class DecodeStream:
    """Lazy, single-use sequence of decode events.

    Events arrive in document order. ``ErrorEvent`` may occur up to twice
    for input that is not XML at all; ``EndEvent`` occurs at most once and
    never after an error. An unknown reference type aborts the whole decode.

    Parameters
    ----------
    source : Source
        Classified input.
    options : DecodeOptions | None, optional
        Chunking options.
    audit_logger : AuditLogger | None, optional
        Receives stage, record, progress and error events.
    """

    def __init__(
        self,
        source: Source,
        options: DecodeOptions | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._source = source
        self._options = options or DecodeOptions()
        self._audit = audit_logger
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._consumed = False
        self._failed = False
        self._ended = False
        self._counters = {"records": 0, "errors": 0}

    @property
    def total(self) -> int | None:
        """Input size in bytes, None when unknown."""
        return self._source.total

    def __iter__(self) -> Iterator[DecodeEvent]:
        if self._consumed:
            raise RuntimeError("DecodeStream can only be consumed once")
        self._consumed = True
        return self._events()

    def on(self, kind: str, callback: Callable[..., Any]) -> "DecodeStream":
        """Register a listener for use with run().

        ``ref`` listeners receive the Reference, ``progress`` listeners
        ``(offset, total)``, ``error`` listeners the exception, and ``end``
        listeners no arguments.

        Parameters
        ----------
        kind : str
            One of "ref", "progress", "error", "end".
        callback : Callable[..., Any]
            Listener.

        Returns
        -------
        DecodeStream
            This stream, for chaining.
        """
        if kind not in _EVENT_KINDS:
            raise ValueError(f"Unknown event kind: {kind!r}")
        self._listeners[kind].append(callback)
        return self

    def run(self) -> None:
        """Consume the stream, dispatching each event to its listeners.

        Raises
        ------
        EndNoteXMLError
            The first error, if no ``error`` listener is registered.
        """
        for event in self:
            listeners = self._listeners[event.kind]
            if isinstance(event, ErrorEvent) and not listeners:
                raise event.error

            for listener in listeners:
                if isinstance(event, RefEvent):
                    listener(event.reference)
                elif isinstance(event, ProgressEvent):
                    listener(event.offset, event.total)
                elif isinstance(event, ErrorEvent):
                    listener(event.error)
                else:
                    listener()

    def references(self) -> Iterator[Reference]:
        """Yield decoded references only.

        Progress and end events still reach listeners registered with on().

        Raises
        ------
        EndNoteXMLError
            The first error encountered.
        """
        for event in self:
            if isinstance(event, RefEvent):
                yield event.reference
            elif isinstance(event, ErrorEvent):
                raise event.error
            elif isinstance(event, ProgressEvent):
                for listener in self._listeners["progress"]:
                    listener(event.offset, event.total)
            else:
                for listener in self._listeners["end"]:
                    listener()

    def _events(self) -> Iterator[DecodeEvent]:
        assembler: RecordAssembler | None = None
        total = self._source.total
        offset = 0

        if self._audit is not None:
            self._audit.stage_started(STAGE, total_bytes=total)

        try:
            for consumed, chunk in self._source.chunks(self._options.chunk_size):
                offset += consumed
                if assembler is None:
                    # a stream's encoding is settled once its first chunk is read
                    assembler = RecordAssembler(Tokenizer(encoding=self._source.encoding))
                yield from self._translate(assembler.feed(chunk))
                if self._failed or assembler.done:
                    break
                if self._audit is not None:
                    self._audit.progress(offset, total)
                yield ProgressEvent(offset, total)

            if not self._failed:
                if assembler is None:
                    assembler = RecordAssembler(Tokenizer(encoding=self._source.encoding))
                yield from self._translate(assembler.close())
        finally:
            if self._audit is not None:
                self._audit.stage_finished(STAGE, counters=dict(self._counters))

    def _translate(self, items: Iterator[AssemblyEvent]) -> Iterator[DecodeEvent]:
        for item in items:
            if isinstance(item, AssemblyError):
                yield self._error(item.error)
            elif self._failed:
                return
            elif isinstance(item, Fragment):
                try:
                    reference = decode_record(item.xml)
                except (UnknownTypeError, StructureError, MalformedXMLError) as exc:
                    yield self._error(exc)
                    return
                self._counters["records"] += 1
                if self._audit is not None:
                    rid = None if reference.rec_number is None else str(reference.rec_number)
                    self._audit.record_decoded(rid, reference.type)
                yield RefEvent(reference)
            elif isinstance(item, Finished) and not self._ended:
                self._ended = True
                yield EndEvent()

    def _error(self, error: EndNoteXMLError) -> ErrorEvent:
        self._failed = True
        self._counters["errors"] += 1
        if self._audit is not None:
            self._audit.error(type(error).__name__, str(error), stage=STAGE)
        return ErrorEvent(error)


def parse(
    source: Any,
    *,
    options: DecodeOptions | None = None,
    audit_logger: AuditLogger | None = None,
) -> DecodeStream:
    """Decode EndNote XML from a buffer, string or readable stream.

    The input kind is checked immediately; parsing starts only when the
    returned stream is iterated or run.

    Parameters
    ----------
    source : Any
        bytes/bytearray/memoryview, str, or an object with ``read()``.
    options : DecodeOptions | None, optional
        Chunking options.
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Returns
    -------
    DecodeStream
        Lazy event sequence.

    Raises
    ------
    InputShapeError
        If ``source`` is of an unsupported kind.

    Examples
    --------
        >>> from endnote_xml import parse
        >>> with open("library.xml", "rb") as f:
        ...     refs = list(parse(f).references())
    """
    return DecodeStream(open_source(source), options=options, audit_logger=audit_logger)

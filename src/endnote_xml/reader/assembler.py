"""Record assembler: rebuilds one standalone XML document per record.

The assembler walks the tokenizer output and copies everything between
``<record>`` and ``</record>`` into a fresh buffer wrapped in the EndNote
document skeleton. Each completed buffer is a Fragment that the record
decoder can parse on its own, so only one record is ever held in memory.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from endnote_xml.errors import EndNoteXMLError, MalformedXMLError, StructureError
from endnote_xml.models.field_map import STYLE_TAG
from endnote_xml.reader.tokenizer import (
    CloseTag,
    EndOfInput,
    OpenTag,
    Text,
    Token,
    Tokenizer,
    TokenError,
)
from endnote_xml.utils import escape_xml

__all__ = [
    "Fragment",
    "AssemblyError",
    "Finished",
    "AssemblyEvent",
    "RecordAssembler",
    "FRAGMENT_PROLOG",
    "FRAGMENT_EPILOG",
]

ROOT_TAG = "xml"
RECORD_TAG = "record"
FRAGMENT_PROLOG = '<?xml version="1.0" encoding="UTF-8"?><xml><records>'
FRAGMENT_EPILOG = "</records></xml>"

# Surfaced errors per run: the first failure plus one trailing diagnosis
_MAX_ERRORS = 2


@dataclass(frozen=True)
class Fragment:
    """A self-contained XML document holding exactly one ``<record>``."""

    xml: str


@dataclass(frozen=True)
class AssemblyError:
    """A failure to surface to the caller."""

    error: EndNoteXMLError


@dataclass(frozen=True)
class Finished:
    """The document ended cleanly."""


AssemblyEvent: TypeAlias = Fragment | AssemblyError | Finished


class RecordAssembler:
    """Turn a token stream into record fragments.

    Parameters
    ----------
    tokenizer : Tokenizer
        Tokenizer owned by this assembler. The assembler calls its
        ``close`` once after the first error to collect a trailing
        diagnosis, and never re-enters its own error handling.
    """

    def __init__(self, tokenizer: Tokenizer) -> None:
        self._tokenizer = tokenizer
        self._buffer: list[str] = []
        self._inside = False
        self._root_checked = False
        self._errors = 0
        self._done = False

    @property
    def done(self) -> bool:
        """Whether the assembler has finished or failed."""
        return self._done

    def feed(self, chunk: bytes) -> Iterator[AssemblyEvent]:
        """Tokenize a chunk and yield the events it completes."""
        if self._done:
            return
        yield from self._consume(self._tokenizer.feed(chunk))

    def close(self) -> Iterator[AssemblyEvent]:
        """Signal end of input and yield the remaining events."""
        if self._done:
            return
        yield from self._consume(self._tokenizer.close())

    def assemble(self, chunks: Iterable[bytes]) -> Iterator[AssemblyEvent]:
        """Yield all events for an iterable of input chunks.

        Parameters
        ----------
        chunks : Iterable[bytes]
            Document slices in order.

        Yields
        ------
        AssemblyEvent
            Fragments in document order, then Finished or up to two
            AssemblyErrors.
        """
        for chunk in chunks:
            yield from self.feed(chunk)
            if self._done:
                return
        yield from self.close()

    def _consume(self, tokens: Iterable[Token]) -> Iterator[AssemblyEvent]:
        for token in tokens:
            if self._done:
                return

            if isinstance(token, OpenTag):
                yield from self._open_tag(token)
            elif isinstance(token, CloseTag):
                fragment = self._close_tag(token)
                if fragment is not None:
                    yield fragment
            elif isinstance(token, Text):
                if self._inside:
                    self._buffer.append(escape_xml(token.text))
            elif isinstance(token, TokenError):
                yield from self._fail(MalformedXMLError(token.message, kind=token.kind))
            elif isinstance(token, EndOfInput):
                self._done = True
                self._buffer = []
                yield Finished()

    def _open_tag(self, token: OpenTag) -> Iterator[AssemblyEvent]:
        if not self._root_checked:
            self._root_checked = True
            if token.name != ROOT_TAG:
                message = f"Expected <{ROOT_TAG}> root element, found <{token.name}>"
                yield from self._fail(StructureError(message), trailing=False)
                return

        if token.name == RECORD_TAG:
            self._buffer = [FRAGMENT_PROLOG]
            self._inside = True

        if not self._inside:
            return

        self._buffer.append(f"<{token.name}")
        if token.name != STYLE_TAG:
            for key, value in token.attributes:
                self._buffer.append(f' {key}="{escape_xml(value)}"')
        self._buffer.append(">")

    def _close_tag(self, token: CloseTag) -> Fragment | None:
        if not self._inside:
            return None

        self._buffer.append(f"</{token.name}>")
        if token.name != RECORD_TAG:
            return None

        self._buffer.append(FRAGMENT_EPILOG)
        fragment = Fragment("".join(self._buffer))
        self._buffer = []
        self._inside = False
        return fragment

    def _fail(self, error: EndNoteXMLError, trailing: bool = True) -> Iterator[AssemblyEvent]:
        """Surface an error, then at most one trailing error from the tokenizer."""
        self._done = True
        self._buffer = []
        self._inside = False

        if self._errors >= _MAX_ERRORS:
            return
        self._errors += 1
        yield AssemblyError(error)

        if not trailing or self._errors >= _MAX_ERRORS:
            return

        for token in self._tokenizer.close():
            if isinstance(token, TokenError):
                self._errors += 1
                yield AssemblyError(MalformedXMLError(token.message, kind=token.kind))
                return

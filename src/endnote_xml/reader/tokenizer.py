"""Incremental XML tokenizer backed by lxml.

The tokenizer turns raw input chunks into a flat list of tokens (open tag,
close tag, text, error, end of input). lxml performs the well-formedness
checks through its parser target interface; the prolog before the first
``<`` is inspected here so that plain text input is classified before it
ever reaches lxml.
"""

from dataclasses import dataclass
from typing import Any, TypeAlias

from lxml import etree

from endnote_xml.errors import ErrorKind

__all__ = [
    "OpenTag",
    "CloseTag",
    "Text",
    "TokenError",
    "EndOfInput",
    "Token",
    "Tokenizer",
]

_UTF8_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True)
class OpenTag:
    """Start of an element.

    Attributes
    ----------
    name : str
        Local tag name.
    attributes : tuple[tuple[str, str], ...]
        Attribute (name, value) pairs in document order. Attributes in a
        namespace are not kept.
    """

    name: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class CloseTag:
    """End of an element."""

    name: str


@dataclass(frozen=True)
class Text:
    """Character data, unescaped (CDATA sections arrive here too)."""

    text: str


@dataclass(frozen=True)
class TokenError:
    """Tokenizer-level failure.

    Attributes
    ----------
    kind : ErrorKind
        Failure category.
    message : str
        Human readable description.
    """

    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class EndOfInput:
    """The document ended without error."""


Token: TypeAlias = OpenTag | CloseTag | Text | TokenError | EndOfInput


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


class _TokenCollector:
    """lxml parser target that queues tokens in document order."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []

    def start(self, tag: str, attrib: dict[str, str]) -> None:
        attributes = tuple((k, v) for k, v in attrib.items() if not k.startswith("{"))
        self.tokens.append(OpenTag(_local_name(tag), attributes))

    def end(self, tag: str) -> None:
        self.tokens.append(CloseTag(_local_name(tag)))

    def data(self, data: str) -> None:
        self.tokens.append(Text(data))

    def close(self) -> None:
        return None

    def drain(self) -> list[Token]:
        tokens, self.tokens = self.tokens, []
        return tokens


class Tokenizer:
    """Push tokenizer: feed bytes, receive tokens.

    After the first error ``feed`` returns nothing. ``close`` runs its
    terminal step at most once; later calls return an empty list.

    Parameters
    ----------
    encoding : str | None, optional
        Encoding of the fed bytes. When given it overrides any encoding
        declared in the document; by default the document decides.
    """

    def __init__(self, encoding: str | None = None) -> None:
        self._collector = _TokenCollector()
        self._parser: Any = etree.XMLParser(
            encoding=encoding,
            target=self._collector,
            resolve_entities=False,
            no_network=True,
            huge_tree=True,
            remove_comments=True,
            remove_pis=True,
        )
        self._at_start = True
        self._markup_started = False
        self._stray_text = False
        self._failed = False
        self._closed = False

    @property
    def failed(self) -> bool:
        """Whether an error has been reported."""
        return self._failed

    def feed(self, chunk: bytes) -> list[Token]:
        """Tokenize the next chunk of input.

        Parameters
        ----------
        chunk : bytes
            Next slice of the document.

        Returns
        -------
        list[Token]
            Tokens completed by this chunk, possibly ending with a TokenError.
        """
        if self._failed or self._closed or not chunk:
            return []

        if not self._markup_started:
            prolog_tokens, chunk = self._consume_prolog(chunk)
            if prolog_tokens or not chunk:
                return prolog_tokens

        try:
            self._parser.feed(chunk)
        except etree.XMLSyntaxError as exc:
            self._failed = True
            return [*self._collector.drain(), TokenError(ErrorKind.MALFORMED, str(exc))]

        return self._collector.drain()

    def close(self) -> list[Token]:
        """Signal end of input.

        Returns
        -------
        list[Token]
            Remaining tokens followed by EndOfInput, or by a TokenError if
            the document is incomplete or text was found outside the root.
        """
        if self._closed:
            return []
        self._closed = True

        if self._stray_text:
            return [TokenError(ErrorKind.TEXT_OUTSIDE_ROOT, "Text data outside of root node")]

        if not self._markup_started:
            self._failed = True
            return [TokenError(ErrorKind.MALFORMED, "Document is empty")]

        try:
            self._parser.close()
        except etree.XMLSyntaxError as exc:
            self._failed = True
            return [*self._collector.drain(), TokenError(ErrorKind.MALFORMED, str(exc))]

        return [*self._collector.drain(), EndOfInput()]

    def _consume_prolog(self, chunk: bytes) -> tuple[list[Token], bytes]:
        """Skip whitespace before the first tag; reject anything else."""
        if self._at_start and chunk:
            self._at_start = False
            if chunk.startswith(_UTF8_BOM):
                chunk = chunk[len(_UTF8_BOM) :]

        index = chunk.find(b"<")
        head = chunk if index < 0 else chunk[:index]
        if head.strip():
            self._failed = True
            self._stray_text = True
            preview = head.strip()[:20].decode("utf-8", errors="replace")
            message = f"Non-whitespace before first tag: {preview!r}"
            return [TokenError(ErrorKind.NON_WHITESPACE_BEFORE_ROOT, message)], b""

        if index < 0:
            return [], b""

        self._markup_started = True
        return [], chunk[index:]

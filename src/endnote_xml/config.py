"""Decode and output configuration dataclasses."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol, TypeAlias

from endnote_xml.errors import ConfigurationError
from endnote_xml.models import Reference
from endnote_xml.utils import escape_xml

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_FILE_NAME",
    "DEFAULT_TYPE",
    "DecodeOptions",
    "XmlOptions",
    "OutputConfig",
    "RecordLike",
    "Batch",
    "Producer",
    "Content",
    "TextSink",
]

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_FILE_NAME = "EndNote.enl"
DEFAULT_TYPE = "report"


class TextSink(Protocol):
    """Anything with a text ``write`` method (files, StringIO, sockets wrappers)."""

    def write(self, text: str, /) -> Any: ...


RecordLike: TypeAlias = Reference | Mapping[str, Any]
Batch: TypeAlias = Sequence[RecordLike] | RecordLike | None
Producer: TypeAlias = Callable[[int], Batch | Awaitable[Batch]]
Content: TypeAlias = Sequence[RecordLike] | RecordLike | Producer | None


@dataclass(frozen=True)
class DecodeOptions:
    """Options for the streaming decoder.

    Attributes
    ----------
    chunk_size : int
        Number of bytes handed to the tokenizer per step (default: 64 KiB).
        Progress is reported once per chunk.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate options."""
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")


@dataclass(frozen=True)
class XmlOptions:
    """Options controlling the EndNote document preamble.

    Attributes
    ----------
    file : str
        EndNote database filename written into every record (default: "EndNote.enl").
    """

    file: str = DEFAULT_FILE_NAME


@dataclass
class OutputConfig:
    """Configuration for writing EndNote XML.

    Attributes
    ----------
    stream : TextSink | None
        Writable text sink. Required; None raises ConfigurationError.
    content : Content
        A sequence of records, a single record, or a producer called with
        an increasing batch index until it returns None or an empty list.
    xml_options : XmlOptions
        Document preamble options.
    default_type : str
        Canonical type used for records without one (default: "report").
    escape : Callable[[Any], str]
        Text escaping function (default: escape_xml).
    close_stream : bool
        Close the sink after the footer, or after a failure (default: True).
    """

    stream: TextSink | None = None
    content: Content = None
    xml_options: XmlOptions = field(default_factory=XmlOptions)
    default_type: str = DEFAULT_TYPE
    escape: Callable[[Any], str] = escape_xml
    close_stream: bool = True

    def __post_init__(self) -> None:
        """Validate configuration before anything is written."""
        if self.stream is None:
            raise ConfigurationError("A writable 'stream' option must be specified")

        if not callable(getattr(self.stream, "write", None)):
            raise ConfigurationError(
                f"'stream' must have a write() method, got {type(self.stream).__name__}"
            )

        if isinstance(self.xml_options, Mapping):
            self.xml_options = XmlOptions(**self.xml_options)

        if not self.default_type:
            raise ConfigurationError("default_type must be a non-empty type identifier")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "OutputConfig":
        """Build a config from a camelCase options mapping.

        Recognized keys: ``stream``, ``content``, ``xmlOptions`` (with
        ``file``), ``defaultType``, ``escape``, ``closeStream``.

        Parameters
        ----------
        options : Mapping[str, Any]
            Options mapping.

        Returns
        -------
        OutputConfig
            Validated configuration.

        Raises
        ------
        ConfigurationError
            If ``stream`` is missing or an option is invalid.
        """
        kwargs: dict[str, Any] = {
            "stream": options.get("stream"),
            "content": options.get("content"),
        }
        if options.get("xmlOptions") is not None:
            kwargs["xml_options"] = XmlOptions(**options["xmlOptions"])
        if options.get("defaultType") is not None:
            kwargs["default_type"] = options["defaultType"]
        if options.get("escape") is not None:
            kwargs["escape"] = options["escape"]
        if options.get("closeStream") is not None:
            kwargs["close_stream"] = bool(options["closeStream"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert the serializable settings to a dictionary."""
        return {
            "xml_options": asdict(self.xml_options),
            "default_type": self.default_type,
            "close_stream": self.close_stream,
        }

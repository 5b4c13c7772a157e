"""Exception hierarchy for EndNote XML decoding and encoding."""

from enum import Enum

__all__ = [
    "ErrorKind",
    "EndNoteXMLError",
    "InputShapeError",
    "MalformedXMLError",
    "StructureError",
    "UnknownTypeError",
    "ConfigurationError",
    "ProducerError",
]


class ErrorKind(str, Enum):
    """Category of a tokenizer-level failure."""

    NON_WHITESPACE_BEFORE_ROOT = "non_whitespace_before_root"
    TEXT_OUTSIDE_ROOT = "text_outside_root"
    MALFORMED = "malformed"


class EndNoteXMLError(Exception):
    """Base class for all endnote_xml errors."""


class InputShapeError(EndNoteXMLError, TypeError):
    """Raised when parse() receives neither bytes, str nor a readable stream."""


class MalformedXMLError(EndNoteXMLError):
    """Raised when the input is not well-formed XML.

    Attributes
    ----------
    kind : ErrorKind
        Failure category reported by the tokenizer.
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.MALFORMED) -> None:
        """Initialize malformed XML error.

        Parameters
        ----------
        message : str
            Error message.
        kind : ErrorKind, optional
            Failure category, by default ErrorKind.MALFORMED.
        """
        super().__init__(message)
        self.kind = kind


class StructureError(EndNoteXMLError):
    """Raised when well-formed XML lacks the EndNote document structure."""


class UnknownTypeError(EndNoteXMLError, ValueError):
    """Raised when a reference type has no row in the type table.

    Attributes
    ----------
    type_name : str | None
        The unrecognized EndNote type name or canonical identifier.
    """

    def __init__(self, message: str, type_name: str | None = None) -> None:
        """Initialize unknown type error.

        Parameters
        ----------
        message : str
            Error message.
        type_name : str | None, optional
            Offending type name or identifier.
        """
        super().__init__(message)
        self.type_name = type_name


class ConfigurationError(EndNoteXMLError, ValueError):
    """Raised when output or decode options are missing or invalid."""


class ProducerError(EndNoteXMLError):
    """Raised when a batch producer fails during output.

    Attributes
    ----------
    batch : int
        Index of the batch being requested when the producer failed.
    """

    def __init__(self, message: str, batch: int) -> None:
        """Initialize producer error.

        Parameters
        ----------
        message : str
            Error message.
        batch : int
            Batch index.
        """
        super().__init__(message)
        self.batch = batch

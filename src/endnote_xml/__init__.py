"""Streaming codec for EndNote XML bibliographic exports.

This package provides:
- Data models (endnote_xml.models) — Reference, type table, field map
- Reader (endnote_xml.reader) — streaming tokenizer, record assembler, decoder
- Writer (endnote_xml.writer) — record encoder and output controller
- Configuration (endnote_xml.config) — decode and output options
- Errors (endnote_xml.errors) — exception hierarchy
- Audit (endnote_xml.audit) — structured JSONL event logging
- CLI (endnote_xml.cli) — command-line interface
- Public API (endnote_xml.api) — file-level convenience functions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from endnote_xml.api import iter_file, parse_file, read_jsonl, write_file, write_jsonl
from endnote_xml.config import DecodeOptions, OutputConfig, XmlOptions
from endnote_xml.errors import (
    ConfigurationError,
    EndNoteXMLError,
    ErrorKind,
    InputShapeError,
    MalformedXMLError,
    ProducerError,
    StructureError,
    UnknownTypeError,
)
from endnote_xml.models import REF_TYPES, Reference
from endnote_xml.reader import parse
from endnote_xml.utils import escape_xml
from endnote_xml.writer import output, output_async

__all__ = [
    "__version__",
    "__license__",
    # Codec
    "parse",
    "output",
    "output_async",
    "escape_xml",
    # Models and options
    "Reference",
    "REF_TYPES",
    "DecodeOptions",
    "OutputConfig",
    "XmlOptions",
    # Files
    "parse_file",
    "iter_file",
    "write_file",
    "write_jsonl",
    "read_jsonl",
    # Errors
    "EndNoteXMLError",
    "ErrorKind",
    "InputShapeError",
    "MalformedXMLError",
    "StructureError",
    "UnknownTypeError",
    "ConfigurationError",
    "ProducerError",
]

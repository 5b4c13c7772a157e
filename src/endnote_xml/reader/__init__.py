"""EndNote XML decoding.

Main Components
---------------
- parse: Streaming decode entry point returning a DecodeStream
- Tokenizer: Incremental lxml-backed tokenizer
- RecordAssembler: Per-record fragment builder
- decode_record: Fragment to Reference mapping (xmltodict)
"""

from endnote_xml.reader.assembler import RecordAssembler
from endnote_xml.reader.decoder import decode_record, parse_fragment
from endnote_xml.reader.stream import (
    DecodeEvent,
    DecodeStream,
    EndEvent,
    ErrorEvent,
    ProgressEvent,
    RefEvent,
    parse,
)
from endnote_xml.reader.tokenizer import Tokenizer

__all__ = [
    "parse",
    "DecodeStream",
    "DecodeEvent",
    "RefEvent",
    "ProgressEvent",
    "ErrorEvent",
    "EndEvent",
    "Tokenizer",
    "RecordAssembler",
    "decode_record",
    "parse_fragment",
]

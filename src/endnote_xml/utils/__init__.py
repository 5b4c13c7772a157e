"""Common utility functions for endnote_xml.

This module consolidates shared helpers: XML escaping, timestamps and
stream size probing.
"""

from endnote_xml.utils.escape import escape_xml
from endnote_xml.utils.files import probe_stream_size
from endnote_xml.utils.timestamps import get_iso_timestamp

__all__ = [
    "escape_xml",
    "get_iso_timestamp",
    "probe_stream_size",
]

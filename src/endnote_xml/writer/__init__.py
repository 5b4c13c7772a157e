"""EndNote XML encoding.

Main Components
---------------
- output / output_async: Document writer driving a text sink
- encode_record: Reference to ``<record>`` markup
"""

from endnote_xml.writer.encoder import FOREIGN_KEY_DB_ID, as_reference, encode_record
from endnote_xml.writer.output import FOOTER, HEADER, output, output_async

__all__ = [
    "output",
    "output_async",
    "encode_record",
    "as_reference",
    "HEADER",
    "FOOTER",
    "FOREIGN_KEY_DB_ID",
]

"""Shared data types for endnote_xml.

This package contains the canonical reference model and the static tables
consumed by both the decoder and the encoder:
- Reference → endnote_xml.models.reference
- Type table → endnote_xml.models.ref_types
- Field map → endnote_xml.models.field_map
"""

from endnote_xml.models.field_map import (
    FORCE_LIST,
    PERIODICAL_FIELD,
    SCALAR_FIELDS,
    TITLE_FIELDS,
    URL_GROUPS,
    FieldMapping,
)
from endnote_xml.models.ref_types import (
    REF_TYPES,
    RefType,
    ref_type_for_canonical_id,
    ref_type_for_wire_name,
)
from endnote_xml.models.reference import CANONICAL_NAMES, Reference

__all__ = [
    # Reference model
    "Reference",
    "CANONICAL_NAMES",
    # Type table
    "RefType",
    "REF_TYPES",
    "ref_type_for_wire_name",
    "ref_type_for_canonical_id",
    # Field map
    "FieldMapping",
    "SCALAR_FIELDS",
    "TITLE_FIELDS",
    "PERIODICAL_FIELD",
    "URL_GROUPS",
    "FORCE_LIST",
]

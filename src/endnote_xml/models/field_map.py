"""Centralized field mappings between canonical references and EndNote XML.

This module defines which canonical field corresponds to which EndNote
element. The decoder and the encoder both read these tables, so adding a
plain text field only requires a new entry in SCALAR_FIELDS.
"""

from typing import NamedTuple

__all__ = [
    "FieldMapping",
    "SCALAR_FIELDS",
    "TITLE_FIELDS",
    "PERIODICAL_FIELD",
    "URL_GROUPS",
    "FORCE_LIST",
    "STYLE_TAG",
    "STYLE_OPEN",
    "STYLE_CLOSE",
]


class FieldMapping(NamedTuple):
    """Binding of one canonical field to one EndNote element.

    Attributes
    ----------
    canonical : str
        Canonical field name (e.g., 'researchNotes').
    attribute : str
        Attribute name on Reference (e.g., 'research_notes').
    element : str
        EndNote element name (e.g., 'research-notes').
    """

    canonical: str
    attribute: str
    element: str


# Direct children of <record>, written in this order
SCALAR_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("abstract", "abstract", "abstract"),
    FieldMapping("accessDate", "access_date", "access-date"),
    FieldMapping("accession", "accession", "accession-num"),
    FieldMapping("address", "address", "auth-address"),
    FieldMapping("caption", "caption", "caption"),
    FieldMapping("databaseProvider", "database_provider", "remote-database-provider"),
    FieldMapping("database", "database", "remote-database-name"),
    FieldMapping("doi", "doi", "electronic-resource-num"),
    FieldMapping("isbn", "isbn", "isbn"),
    FieldMapping("label", "label", "label"),
    FieldMapping("language", "language", "language"),
    FieldMapping("notes", "notes", "notes"),
    FieldMapping("number", "number", "number"),
    FieldMapping("pages", "pages", "pages"),
    FieldMapping("researchNotes", "research_notes", "research-notes"),
    FieldMapping("section", "section", "section"),
    FieldMapping("volume", "volume", "volume"),
    FieldMapping("workType", "work_type", "work-type"),
    FieldMapping("custom1", "custom1", "custom1"),
    FieldMapping("custom2", "custom2", "custom2"),
    FieldMapping("custom3", "custom3", "custom3"),
    FieldMapping("custom4", "custom4", "custom4"),
    FieldMapping("custom5", "custom5", "custom5"),
    FieldMapping("custom6", "custom6", "custom6"),
    FieldMapping("custom7", "custom7", "custom7"),
)

# Children of <titles>
TITLE_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("title", "title", "title"),
    FieldMapping("journal", "journal", "secondary-title"),
    FieldMapping("titleShort", "title_short", "short-title"),
    FieldMapping("journalAlt", "journal_alt", "alt-title"),
)

# <periodical><full-title>
PERIODICAL_FIELD = FieldMapping("periodical", "periodical", "full-title")

# Read in this order and concatenated; only related-urls is written
URL_GROUPS: tuple[str, ...] = ("related-urls", "text-urls")

# Elements that always parse as lists, even with a single occurrence
FORCE_LIST: tuple[str, ...] = ("author", "keyword", "url", "style")

STYLE_TAG = "style"
STYLE_OPEN = '<style face="normal" font="default" size="100%">'
STYLE_CLOSE = "</style>"

"""Canonical reference data model.

A Reference is the format-neutral representation of one bibliographic
record. Decoding produces one per EndNote ``<record>``; encoding consumes
them (or plain mappings keyed by canonical field name).
"""

import datetime
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from endnote_xml.models.field_map import PERIODICAL_FIELD, SCALAR_FIELDS, TITLE_FIELDS

__all__ = ["Reference", "CANONICAL_NAMES"]

_SEQUENCE_ATTRIBUTES = ("authors", "keywords", "urls")
_PASSTHROUGH_ATTRIBUTES = ("rec_number", "year", "date")

# canonical name -> attribute name
CANONICAL_NAMES: dict[str, str] = {
    "recNumber": "rec_number",
    "type": "type",
    **{m.canonical: m.attribute for m in TITLE_FIELDS},
    PERIODICAL_FIELD.canonical: PERIODICAL_FIELD.attribute,
    **{m.canonical: m.attribute for m in SCALAR_FIELDS},
    "authors": "authors",
    "keywords": "keywords",
    "urls": "urls",
    "year": "year",
    "date": "date",
}

_ATTRIBUTE_TO_CANONICAL = {attr: name for name, attr in CANONICAL_NAMES.items()}


@dataclass(frozen=True)
class Reference:
    """Canonical bibliographic reference.

    Every field is optional; absent fields are None. Sequences are stored
    as non-empty tuples. Field semantics follow the EndNote element each
    one maps to (see ``endnote_xml.models.field_map``).

    Attributes
    ----------
    rec_number : str | int | None
        Source record number, preserved on round-trip.
    type : str | None
        Canonical reference type identifier (e.g., 'journalArticle').
    authors : tuple[str, ...] | None
        Authors in document order; duplicates allowed, empty strings dropped.
    keywords : tuple[str, ...] | None
        Keywords in document order; never contains empty strings.
    urls : tuple[str, ...] | None
        URLs in document order; never contains empty strings.
    year : str | int | None
        Publication year.
    date : datetime.date | str | None
        Calendar date or freeform publication date text.
    """

    rec_number: str | int | None = None
    type: str | None = None
    title: str | None = None
    journal: str | None = None
    title_short: str | None = None
    journal_alt: str | None = None
    periodical: str | None = None
    authors: tuple[str, ...] | None = None
    year: str | int | None = None
    date: datetime.date | str | None = None
    keywords: tuple[str, ...] | None = None
    urls: tuple[str, ...] | None = None
    abstract: str | None = None
    access_date: str | None = None
    accession: str | None = None
    address: str | None = None
    caption: str | None = None
    database_provider: str | None = None
    database: str | None = None
    doi: str | None = None
    isbn: str | None = None
    label: str | None = None
    language: str | None = None
    notes: str | None = None
    number: str | None = None
    pages: str | None = None
    research_notes: str | None = None
    section: str | None = None
    volume: str | None = None
    work_type: str | None = None
    custom1: str | None = None
    custom2: str | None = None
    custom3: str | None = None
    custom4: str | None = None
    custom5: str | None = None
    custom6: str | None = None
    custom7: str | None = None

    def __post_init__(self) -> None:
        """Store sequences as tuples without empty strings; empty sequences as absence."""
        for name in _SEQUENCE_ATTRIBUTES:
            value = getattr(self, name)
            if value is None:
                continue
            items = _as_string_tuple(value)
            object.__setattr__(self, name, items or None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a mapping keyed by canonical field name.

        Returns
        -------
        dict[str, Any]
            Present fields only; sequences as lists.
        """
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = list(value)
            data[_ATTRIBUTE_TO_CANONICAL[f.name]] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Reference":
        """Build a Reference from a mapping keyed by canonical field name.

        Unknown keys are ignored. Text fields given as numbers are stored
        as strings; ``recNumber``, ``year`` and ``date`` keep their type.

        Parameters
        ----------
        data : Mapping[str, Any]
            Mapping such as ``{"title": "Hello", "volume": 1}``.

        Returns
        -------
        Reference
            Reconstructed reference.
        """
        values: dict[str, Any] = {}
        for name, attr in CANONICAL_NAMES.items():
            value = data.get(name)
            if value is None or value == "":
                continue
            if attr in _SEQUENCE_ATTRIBUTES or attr in _PASSTHROUGH_ATTRIBUTES:
                values[attr] = value
            else:
                values[attr] = value if isinstance(value, str) else str(value)
        return cls(**values)


def _as_string_tuple(value: Any) -> tuple[str, ...]:
    """Strings of a sequence value; empty strings are dropped."""
    if isinstance(value, str):
        value = (value,)
    elif not isinstance(value, Iterable):
        value = (value,)
    items = (item if isinstance(item, str) else str(item) for item in value)
    return tuple(item for item in items if item)

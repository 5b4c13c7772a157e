"""Record encoder: one Reference to one EndNote ``<record>`` element.

Pure string building; the output controller owns ordinals and the sink.
Every text value goes through the escape function and is wrapped in the
default EndNote style run.
"""

import datetime
from collections.abc import Callable, Mapping
from typing import Any

from endnote_xml.config import DEFAULT_FILE_NAME, DEFAULT_TYPE, RecordLike
from endnote_xml.errors import UnknownTypeError
from endnote_xml.models import (
    PERIODICAL_FIELD,
    SCALAR_FIELDS,
    TITLE_FIELDS,
    Reference,
    ref_type_for_canonical_id,
)
from endnote_xml.models.field_map import STYLE_CLOSE, STYLE_OPEN
from endnote_xml.utils import escape_xml

__all__ = ["FOREIGN_KEY_DB_ID", "SOURCE_APP", "encode_record", "as_reference"]

FOREIGN_KEY_DB_ID = "s55prpsswfsepue0xz25pxai2p909xtzszzv"
SOURCE_APP = '<source-app name="EndNote" version="16.0">EndNote</source-app>'

Escape = Callable[[Any], str]


def as_reference(record: RecordLike) -> Reference:
    """Coerce a mapping keyed by canonical field name into a Reference."""
    if isinstance(record, Reference):
        return record
    if isinstance(record, Mapping):
        return Reference.from_dict(record)
    raise TypeError(f"Expected a Reference or mapping, got {type(record).__name__}")


def encode_record(
    record: RecordLike,
    ordinal: int,
    *,
    file_name: str = DEFAULT_FILE_NAME,
    default_type: str = DEFAULT_TYPE,
    escape: Escape = escape_xml,
) -> str:
    """Encode one reference as an EndNote ``<record>`` element.

    Parameters
    ----------
    record : RecordLike
        Reference or mapping keyed by canonical field name.
    ordinal : int
        1-based position in the output, used when the record has no
        ``recNumber``.
    file_name : str, optional
        EndNote database filename for the ``<database>`` element.
    default_type : str, optional
        Canonical type for records without one.
    escape : Callable[[Any], str], optional
        Text escaping function.

    Returns
    -------
    str
        The ``<record>...</record>`` markup.

    Raises
    ------
    UnknownTypeError
        If the record's type (or the default) has no row in the type table.
    """
    ref = as_reference(record)

    type_id = ref.type or default_type
    row = ref_type_for_canonical_id(type_id)
    if row is None:
        raise UnknownTypeError(
            f"Unknown or unsupported reference type: {type_id}", type_name=type_id
        )

    number = ref.rec_number if ref.rec_number not in (None, "") else ordinal
    parts = [
        "<record>",
        f'<database name="{escape(file_name)}" path="c:\\{escape(file_name)}">'
        f"{escape(file_name)}</database>",
        SOURCE_APP,
        f"<rec-number>{escape(number)}</rec-number>",
        f'<foreign-keys><key app="EN" db-id="{FOREIGN_KEY_DB_ID}">{escape(number)}</key>'
        "</foreign-keys>",
        f'<ref-type name="{escape(row.wire_name)}">{escape(row.wire_id)}</ref-type>',
    ]

    if ref.authors:
        parts.append("<contributors><authors>")
        parts.extend(_styled("author", author, escape) for author in ref.authors)
        parts.append("</authors></contributors>")

    titles = [
        _styled(m.element, getattr(ref, m.attribute), escape)
        for m in TITLE_FIELDS
        if getattr(ref, m.attribute)
    ]
    if titles:
        parts.append("<titles>")
        parts.extend(titles)
        parts.append("</titles>")

    if ref.periodical:
        parts.append(
            f"<periodical>{_styled(PERIODICAL_FIELD.element, ref.periodical, escape)}</periodical>"
        )

    for mapping in SCALAR_FIELDS:
        value = getattr(ref, mapping.attribute)
        if value:
            parts.append(_styled(mapping.element, value, escape))

    parts.append(_dates(ref.year, ref.date, escape))

    if ref.urls:
        parts.append("<urls><related-urls>")
        parts.extend(_styled("url", url, escape) for url in ref.urls)
        parts.append("</related-urls></urls>")

    if ref.keywords:
        parts.append("<keywords>")
        parts.extend(_styled("keyword", keyword, escape) for keyword in ref.keywords)
        parts.append("</keywords>")

    parts.append("</record>")
    return "".join(parts)


def _styled(element: str, value: Any, escape: Escape) -> str:
    return f"<{element}>{STYLE_OPEN}{escape(value)}{STYLE_CLOSE}</{element}>"


def _format_date(value: datetime.date | str) -> str:
    if isinstance(value, datetime.date):
        return value.strftime("%Y-%m-%d")
    return value


def _dates(year: Any, date: datetime.date | str | None, escape: Escape) -> str:
    """Build ``<dates>``; year and date are each emitted only when present."""
    has_year = year not in (None, "")
    has_date = date not in (None, "")
    if not has_year and not has_date:
        return ""

    inner: list[str] = []
    if has_year:
        inner.append(_styled("year", year, escape))
    if has_date:
        inner.append(f"<pub-dates>{_styled('date', _format_date(date), escape)}</pub-dates>")
    return f"<dates>{''.join(inner)}</dates>"

"""Record decoder: one EndNote record fragment to one Reference.

The fragment is parsed into a nested dict tree with xmltodict and mapped
onto Reference fields through the field map and type table. Text values
prefer the ``<style>`` runs EndNote wraps around most content and fall back
to the element's own text.
"""

import re
from typing import Any
from xml.parsers.expat import ExpatError

import xmltodict

from endnote_xml.errors import MalformedXMLError, StructureError, UnknownTypeError
from endnote_xml.models import (
    FORCE_LIST,
    PERIODICAL_FIELD,
    SCALAR_FIELDS,
    TITLE_FIELDS,
    URL_GROUPS,
    Reference,
    ref_type_for_wire_name,
)
from endnote_xml.models.field_map import STYLE_TAG

__all__ = ["decode_record", "parse_fragment"]

_TEXT_KEY = "#text"
_WHITESPACE_RUN = re.compile(r"\s{2,}")


def _lower_keys(path: Any, key: str, value: Any) -> tuple[str, Any]:
    return key.lower(), value


def parse_fragment(fragment: str) -> dict[str, Any]:
    """Parse a record fragment into a nested dict tree.

    Tag and attribute names are lowercased; ``author``, ``keyword``,
    ``url`` and ``style`` always parse as lists.

    Parameters
    ----------
    fragment : str
        Standalone XML document containing one ``<record>``.

    Returns
    -------
    dict[str, Any]
        The ``<record>`` subtree.

    Raises
    ------
    MalformedXMLError
        If the fragment is not well-formed.
    StructureError
        If the fragment lacks ``xml/records/record``.
    """
    try:
        tree = xmltodict.parse(
            fragment,
            force_list=FORCE_LIST,
            postprocessor=_lower_keys,
            strip_whitespace=False,
            disable_entities=True,
        )
    except ExpatError as exc:
        raise MalformedXMLError(f"Record fragment is not well-formed: {exc}") from exc
    record = _child(_child(tree, "xml"), "records")
    record = _child(record, "record")
    if not isinstance(record, dict):
        raise StructureError("Record fragment has no xml/records/record element")
    return record


def decode_record(fragment: str) -> Reference:
    """Decode one record fragment into a Reference.

    Parameters
    ----------
    fragment : str
        Standalone XML document containing one ``<record>``.

    Returns
    -------
    Reference
        Decoded reference; fields missing from the record are None.

    Raises
    ------
    UnknownTypeError
        If the ``ref-type`` name has no row in the type table.
    MalformedXMLError
        If the fragment is not well-formed.
    StructureError
        If the fragment lacks ``xml/records/record``.
    """
    record = parse_fragment(fragment)
    values: dict[str, Any] = {}

    rec_number = _text(record.get("rec-number"))
    if rec_number is not None:
        values["rec_number"] = rec_number

    ref_type = _decode_type(record)
    if ref_type is not None:
        values["type"] = ref_type

    titles = record.get("titles")
    for mapping in TITLE_FIELDS:
        value = _text(_child(titles, mapping.element))
        if value is not None:
            values[mapping.attribute] = value

    periodical = _text(_child(record.get("periodical"), PERIODICAL_FIELD.element))
    if periodical is not None:
        values[PERIODICAL_FIELD.attribute] = periodical

    authors = _child(_child(record.get("contributors"), "authors"), "author")
    values["authors"] = _texts(authors)

    for mapping in SCALAR_FIELDS:
        value = _text(record.get(mapping.element))
        if value is not None:
            values[mapping.attribute] = value

    # year and date are independent; neither is derived from the other
    dates = record.get("dates")
    year = _text(_child(dates, "year"))
    if year is not None:
        values["year"] = year
    date = _text(_child(_child(dates, "pub-dates"), "date"))
    if date is not None:
        values["date"] = date

    values["keywords"] = _texts(_child(record.get("keywords"), "keyword"))

    urls: list[str] = []
    for group in URL_GROUPS:
        urls.extend(_texts(_child(_child(record.get("urls"), group), "url")))
    values["urls"] = urls

    return Reference(**values)


def _decode_type(record: dict[str, Any]) -> str | None:
    node = record.get("ref-type")
    if isinstance(node, list):
        node = node[0] if node else None
    if not isinstance(node, dict) or node.get("@name") is None:
        return None

    wire_name = node["@name"].strip()
    row = ref_type_for_wire_name(wire_name)
    if row is None:
        raise UnknownTypeError(f"Unknown EndNote type: {wire_name}", type_name=wire_name)
    return row.canonical_id


def _child(node: Any, key: str) -> Any:
    if isinstance(node, list):
        node = node[0] if node else None
    if isinstance(node, dict):
        return node.get(key)
    return None


def _text(node: Any) -> str | None:
    """Styled text if present, else plain text; whitespace-normalized."""
    if isinstance(node, list):
        node = node[0] if node else None

    if isinstance(node, str):
        raw = node
    elif isinstance(node, dict):
        styles = node.get(STYLE_TAG)
        if styles:
            raw = "".join(_plain(run) for run in styles)
        else:
            raw = node.get(_TEXT_KEY) or ""
    else:
        return None

    normalized = _WHITESPACE_RUN.sub(" ", raw).strip()
    return normalized or None


def _plain(node: Any) -> str:
    if isinstance(node, str):
        return node
    if isinstance(node, dict):
        return node.get(_TEXT_KEY) or ""
    return ""


def _texts(nodes: Any) -> list[str]:
    if nodes is None:
        return []
    if not isinstance(nodes, list):
        nodes = [nodes]
    texts = (_text(node) for node in nodes)
    return [text for text in texts if text]

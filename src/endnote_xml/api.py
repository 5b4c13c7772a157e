"""Public API for EndNote XML files.

This module provides file-level conveniences on top of the streaming
decoder and the output controller, enabling:
- Parsing an EndNote XML file into Reference objects
- Writing references to an EndNote XML file
- Exporting and re-importing references as JSONL
"""

import datetime
import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from endnote_xml.audit import AuditLogger
from endnote_xml.config import (
    DEFAULT_FILE_NAME,
    DEFAULT_TYPE,
    DecodeOptions,
    OutputConfig,
    XmlOptions,
)
from endnote_xml.errors import EndNoteXMLError
from endnote_xml.models import Reference
from endnote_xml.reader import ErrorEvent, RefEvent, parse
from endnote_xml.writer import output

__all__ = [
    "parse_file",
    "iter_file",
    "write_file",
    "write_jsonl",
    "read_jsonl",
]


def iter_file(
    path: str | Path,
    *,
    options: DecodeOptions | None = None,
    audit_logger: AuditLogger | None = None,
) -> Iterator[Reference]:
    """Lazily decode references from an EndNote XML file.

    The file stays open only while the iterator is consumed.

    Parameters
    ----------
    path : str | Path
        Path to the EndNote XML export.
    options : DecodeOptions | None, optional
        Chunking options.
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Yields
    ------
    Reference
        References in document order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    EndNoteXMLError
        On the first decode error.
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("rb") as f:
        yield from parse(f, options=options, audit_logger=audit_logger).references()


def parse_file(
    path: str | Path,
    *,
    strict: bool = True,
    audit_logger: AuditLogger | None = None,
) -> list[Reference]:
    """Parse an EndNote XML file.

    Parameters
    ----------
    path : str | Path
        Path to the EndNote XML export.
    strict : bool, optional
        If True, raise on the first decode error. If False, return the
        references decoded before it, by default True.
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Returns
    -------
    list[Reference]
        Decoded references in document order.

    Raises
    ------
    EndNoteXMLError
        If decoding fails and strict=True.
    FileNotFoundError
        If file does not exist.

    Examples
    --------
        >>> from endnote_xml import parse_file
        >>> refs = parse_file("library.xml")
        >>> for ref in refs:
        ...     print(ref.title)
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    references: list[Reference] = []
    with file_path.open("rb") as f:
        for event in parse(f, audit_logger=audit_logger):
            if isinstance(event, RefEvent):
                references.append(event.reference)
            elif isinstance(event, ErrorEvent):
                if strict:
                    raise event.error
                break

    return references


def write_file(
    references: Iterable[Reference | dict[str, Any]],
    path: str | Path,
    *,
    file_name: str = DEFAULT_FILE_NAME,
    default_type: str = DEFAULT_TYPE,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Write references to an EndNote XML file.

    Parameters
    ----------
    references : Iterable[Reference | dict[str, Any]]
        References, or mappings keyed by canonical field name.
    path : str | Path
        Output file path.
    file_name : str, optional
        EndNote database filename recorded in each record.
    default_type : str, optional
        Canonical type for references without one.
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Raises
    ------
    UnknownTypeError
        If a reference type has no row in the type table.
    """
    file_path = Path(path)

    with file_path.open("w", encoding="utf-8", newline="") as f:
        config = OutputConfig(
            stream=f,
            content=list(references),
            xml_options=XmlOptions(file=file_name),
            default_type=default_type,
            close_stream=False,
        )
        output(config, audit_logger=audit_logger)


def _json_default(value: Any) -> str:
    if isinstance(value, datetime.date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_jsonl(
    references: Iterable[Reference],
    path: str | Path,
    *,
    sort_keys: bool = True,
) -> int:
    """Write references to JSONL file (one JSON object per line).

    Keys are canonical field names; only present fields are written.

    Parameters
    ----------
    references : Iterable[Reference]
        References to write.
    path : str | Path
        Output file path.
    sort_keys : bool, optional
        Whether to sort dictionary keys for deterministic output,
        by default True.

    Returns
    -------
    int
        Number of lines written.
    """
    file_path = Path(path)
    count = 0

    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        for reference in references:
            json_str = json.dumps(
                reference.to_dict(),
                ensure_ascii=False,
                sort_keys=sort_keys,
                default=_json_default,
            )
            f.write(json_str + "\n")
            count += 1

    return count


def read_jsonl(path: str | Path) -> list[Reference]:
    """Read references from a JSONL file written by write_jsonl.

    Parameters
    ----------
    path : str | Path
        JSONL file path.

    Returns
    -------
    list[Reference]
        References in file order.

    Raises
    ------
    EndNoteXMLError
        If a line is not a JSON object.
    """
    file_path = Path(path)
    references: list[Reference] = []

    with file_path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            data = json.loads(line)
            if not isinstance(data, dict):
                raise EndNoteXMLError(f"{file_path.name}:{line_no}: expected a JSON object")
            references.append(Reference.from_dict(data))

    return references

"""Tests for the streaming decode controller."""

import io
from collections.abc import Callable
from pathlib import Path

import pytest

from endnote_xml import DecodeOptions, parse
from endnote_xml.errors import (
    ErrorKind,
    InputShapeError,
    MalformedXMLError,
    StructureError,
    UnknownTypeError,
)
from endnote_xml.reader import EndEvent, ErrorEvent, ProgressEvent, RefEvent

TWO_RECORDS = (
    "<record><rec-number>1</rec-number><titles><title>First</title></titles></record>",
    "<record><rec-number>2</rec-number><titles><title>Second</title></titles></record>",
)


def _kinds(events: list) -> list[str]:
    return [e.kind for e in events if not isinstance(e, ProgressEvent)]


@pytest.mark.unit
def test_two_records_then_end(wrap: Callable[..., bytes]) -> None:
    """Test a two-record document yields two refs then a single end."""
    events = list(parse(wrap(*TWO_RECORDS)))

    assert _kinds(events) == ["ref", "ref", "end"]
    titles = [e.reference.title for e in events if isinstance(e, RefEvent)]
    assert titles == ["First", "Second"]
    assert isinstance(events[-1], EndEvent)


@pytest.mark.unit
def test_plain_text_yields_two_errors_and_no_end() -> None:
    """Test the literal 'blah blah blah' yields exactly two errors."""
    events = list(parse("blah blah blah"))

    errors = [e.error for e in events if isinstance(e, ErrorEvent)]
    assert [type(e) for e in errors] == [MalformedXMLError, MalformedXMLError]
    assert [e.kind for e in errors] == [
        ErrorKind.NON_WHITESPACE_BEFORE_ROOT,
        ErrorKind.TEXT_OUTSIDE_ROOT,
    ]
    assert not any(isinstance(e, EndEvent) for e in events)


@pytest.mark.unit
def test_unknown_type_aborts_decode(wrap: Callable[..., bytes]) -> None:
    """Test an unknown ref-type stops the decode with a named error."""
    data = wrap(
        TWO_RECORDS[0],
        '<record><ref-type name="Hologram">99</ref-type></record>',
        TWO_RECORDS[1],
    )

    events = list(parse(data))

    assert _kinds(events) == ["ref", "error"]
    error = events[-1].error
    assert isinstance(error, UnknownTypeError)
    assert "Hologram" in str(error)


@pytest.mark.unit
def test_wrong_root_is_single_error() -> None:
    """Test well-formed XML with another root yields one structural error."""
    events = list(parse(b"<library><record/></library>"))

    assert _kinds(events) == ["error"]
    assert isinstance(events[-1].error, StructureError)


@pytest.mark.unit
def test_empty_input_is_single_error() -> None:
    """Test empty input yields one malformed-document error."""
    events = list(parse(b""))

    assert _kinds(events) == ["error"]
    assert isinstance(events[0].error, MalformedXMLError)


@pytest.mark.unit
def test_progress_is_monotonic_and_complete(small_xml_bytes: bytes) -> None:
    """Test progress offsets never decrease and end at the total size."""
    events = list(parse(small_xml_bytes, options=DecodeOptions(chunk_size=256)))

    progress = [e for e in events if isinstance(e, ProgressEvent)]
    offsets = [p.offset for p in progress]
    assert len(progress) > 1
    assert offsets == sorted(offsets)
    assert offsets[-1] == len(small_xml_bytes)
    assert all(p.total == len(small_xml_bytes) for p in progress)
    assert _kinds(events) == ["ref", "ref", "ref", "end"]


@pytest.mark.unit
def test_text_source_offsets_are_bytes() -> None:
    """Test string input is measured in UTF-8 bytes."""
    text = "<xml><records><record><titles><title>Été</title></titles></record></records></xml>"

    events = list(parse(text))

    progress = [e for e in events if isinstance(e, ProgressEvent)]
    assert progress[-1].offset == progress[-1].total == len(text.encode("utf-8"))
    refs = [e.reference for e in events if isinstance(e, RefEvent)]
    assert refs[0].title == "Été"


@pytest.mark.unit
def test_file_stream_total_from_file_size(small_xml_path: Path) -> None:
    """Test a file stream reports its on-disk size as the total."""
    size = small_xml_path.stat().st_size

    with small_xml_path.open("rb") as f:
        stream = parse(f, options=DecodeOptions(chunk_size=512))
        assert stream.total == size
        progress = [e for e in stream if isinstance(e, ProgressEvent)]

    assert progress[-1].offset == size
    assert {p.total for p in progress} == {size}


@pytest.mark.unit
def test_in_memory_stream_total_unknown(wrap: Callable[..., bytes]) -> None:
    """Test a stream without a file descriptor has no known total."""
    events = list(parse(io.BytesIO(wrap(*TWO_RECORDS))))

    progress = [e for e in events if isinstance(e, ProgressEvent)]
    assert progress and all(p.total is None for p in progress)
    assert _kinds(events) == ["ref", "ref", "end"]


@pytest.mark.unit
def test_text_stream_is_accepted(wrap: Callable[..., bytes]) -> None:
    """Test a text-mode stream decodes like bytes."""
    events = list(parse(io.StringIO(wrap(*TWO_RECORDS).decode("utf-8"))))

    assert _kinds(events) == ["ref", "ref", "end"]


@pytest.mark.unit
def test_text_ignores_declared_encoding() -> None:
    """Test a string keeps its characters whatever its declaration says."""
    text = (
        '<?xml version="1.0" encoding="ISO-8859-1"?><xml><records><record>'
        "<titles><title>Été</title></titles></record></records></xml>"
    )

    refs = list(parse(text).references())

    assert refs[0].title == "Été"


@pytest.mark.unit
def test_text_mode_file_with_crlf_reaches_total(tmp_path: Path) -> None:
    """Test a text-mode file counts on-disk bytes, CRLF line endings included."""
    path = tmp_path / "crlf.xml"
    path.write_bytes(
        b"<xml>\r\n<records>\r\n"
        b"<record><titles><title>One</title></titles></record>\r\n"
        b"</records>\r\n</xml>\r\n"
    )
    size = path.stat().st_size

    with path.open("r", encoding="utf-8") as f:
        stream = parse(f, options=DecodeOptions(chunk_size=16))
        events = list(stream)

    progress = [e for e in events if isinstance(e, ProgressEvent)]
    assert stream.total == size
    assert progress[-1].offset == progress[-1].total == size
    assert _kinds(events) == ["ref", "end"]


@pytest.mark.unit
def test_text_mode_file_uses_its_encoding(tmp_path: Path) -> None:
    """Test a text-mode file is decoded with the encoding it was opened with."""
    path = tmp_path / "latin1.xml"
    data = "<xml><records><record><titles><title>Été</title></titles></record></records></xml>"
    path.write_bytes(data.encode("latin-1"))

    with path.open("r", encoding="latin-1") as f:
        stream = parse(f, options=DecodeOptions(chunk_size=8))
        refs = list(stream.references())

    assert refs[0].title == "Été"
    assert stream.total == len(data.encode("latin-1"))


@pytest.mark.unit
def test_namespaced_duplicate_attribute_decodes() -> None:
    """Test a namespaced attribute beside a plain one does not break the record."""
    data = (
        b'<xml xmlns:x="urn:x"><records><record>'
        b'<ref-type name="Book" x:name="Other">6</ref-type>'
        b"</record></records></xml>"
    )

    events = list(parse(data))

    refs = [e.reference for e in events if isinstance(e, RefEvent)]
    assert [r.type for r in refs] == ["book"]
    assert _kinds(events) == ["ref", "end"]


@pytest.mark.unit
@pytest.mark.parametrize("source", [42, None, Path("library.xml"), ["<xml/>"]])
def test_unsupported_input_raises_immediately(source: object) -> None:
    """Test unsupported inputs fail at call time, before any parsing."""
    with pytest.raises(InputShapeError, match="Unknown input type"):
        parse(source)


@pytest.mark.unit
def test_stream_is_lazy_and_single_use(wrap: Callable[..., bytes]) -> None:
    """Test nothing is read before iteration and a stream iterates once."""
    source = io.BytesIO(wrap(*TWO_RECORDS))
    stream = parse(source)

    assert source.tell() == 0
    list(stream)
    with pytest.raises(RuntimeError):
        iter(stream)


@pytest.mark.unit
def test_listeners_receive_events(wrap: Callable[..., bytes]) -> None:
    """Test on()/run() dispatch each kind with its payload."""
    refs: list = []
    progress: list = []
    ends: list = []

    (
        parse(wrap(*TWO_RECORDS))
        .on("ref", refs.append)
        .on("progress", lambda offset, total: progress.append((offset, total)))
        .on("end", lambda: ends.append(True))
        .run()
    )

    assert [r.rec_number for r in refs] == ["1", "2"]
    assert progress[-1][0] == progress[-1][1]
    assert ends == [True]


@pytest.mark.unit
def test_run_raises_without_error_listener() -> None:
    """Test errors propagate when nobody listens for them."""
    with pytest.raises(MalformedXMLError):
        parse("blah blah blah").run()


@pytest.mark.unit
def test_run_reports_errors_to_listener() -> None:
    """Test error listeners receive every error and end never fires."""
    errors: list = []
    ends: list = []

    parse("blah blah blah").on("error", errors.append).on("end", lambda: ends.append(1)).run()

    assert len(errors) == 2
    assert ends == []


@pytest.mark.unit
def test_on_rejects_unknown_kind() -> None:
    """Test listener registration validates the event kind."""
    with pytest.raises(ValueError, match="Unknown event kind"):
        parse(b"<xml/>").on("data", print)


@pytest.mark.unit
def test_references_raises_first_error(wrap: Callable[..., bytes]) -> None:
    """Test references() yields refs then raises the decode error."""
    data = wrap(TWO_RECORDS[0], '<record><ref-type name="Nope">0</ref-type></record>')
    seen = []

    with pytest.raises(UnknownTypeError):
        for ref in parse(data).references():
            seen.append(ref)

    assert len(seen) == 1

"""Output controller: writes a complete EndNote XML document to a sink.

The header goes out once the configuration is validated, records are
encoded one at a time in content order, and the footer follows once the
content is exhausted. Content may be a collection, a single record, or a
producer pulled batch by batch:

    >>> def fetch(batch):
    ...     return pages[batch] if batch < len(pages) else None
    >>> output({"stream": sink, "content": fetch})

``output_async`` accepts producers that return awaitables and yields to the
event loop between batches.
"""

import asyncio
import inspect
from collections.abc import AsyncIterator, Iterable, Iterator, Mapping
from typing import Any

from endnote_xml.audit import AuditLogger
from endnote_xml.config import Batch, OutputConfig, RecordLike, TextSink
from endnote_xml.errors import ConfigurationError, EndNoteXMLError, ProducerError
from endnote_xml.models import Reference
from endnote_xml.writer.encoder import as_reference, encode_record

__all__ = ["HEADER", "FOOTER", "output", "output_async"]

HEADER = '<?xml version="1.0" encoding="UTF-8"?><xml><records>'
FOOTER = "</records></xml>"

STAGE = "encode"


def _coerce_config(config: OutputConfig | Mapping[str, Any]) -> OutputConfig:
    if isinstance(config, OutputConfig):
        return config
    if isinstance(config, Mapping):
        return OutputConfig.from_options(config)
    raise ConfigurationError(
        f"Expected OutputConfig or options mapping, got {type(config).__name__}"
    )


def _is_record(value: Any) -> bool:
    return isinstance(value, (Reference, Mapping))


def _batch_records(batch: Batch) -> list[RecordLike]:
    """Records in one producer batch; empty means exhausted.

    Anything other than a record or a collection of records, such as None
    or False, ends the content.
    """
    if _is_record(batch):
        return [batch]  # type: ignore[list-item]
    if isinstance(batch, (str, bytes)) or not isinstance(batch, Iterable):
        return []
    return list(batch)


class _RecordWriter:
    """Encodes records to the sink with a running ordinal."""

    def __init__(self, config: OutputConfig, audit_logger: AuditLogger | None) -> None:
        self.config = config
        self.stream: TextSink = config.stream  # type: ignore[assignment]
        self.audit = audit_logger
        self.ordinal = 0

    def header(self) -> None:
        if self.audit is not None:
            self.audit.stage_started(STAGE)
        self.stream.write(HEADER)

    def write(self, record: RecordLike) -> None:
        self.ordinal += 1
        reference = as_reference(record)
        self.stream.write(
            encode_record(
                reference,
                self.ordinal,
                file_name=self.config.xml_options.file,
                default_type=self.config.default_type,
                escape=self.config.escape,
            )
        )
        if self.audit is not None:
            rid = reference.rec_number if reference.rec_number not in (None, "") else self.ordinal
            self.audit.record_encoded(str(rid), reference.type or self.config.default_type)

    def footer(self) -> None:
        self.stream.write(FOOTER)
        if self.audit is not None:
            self.audit.stage_finished(STAGE, counters={"records": self.ordinal})

    def fail(self, exc: BaseException) -> None:
        if self.audit is not None:
            self.audit.error(type(exc).__name__, str(exc), stage=STAGE)
            self.audit.set_stage(None)

    def close(self) -> None:
        close = getattr(self.stream, "close", None)
        if self.config.close_stream and callable(close):
            close()


def _check_content(content: Any) -> None:
    """Reject content that is neither records nor a producer, before any write."""
    if content is None or callable(content) or _is_record(content):
        return
    if isinstance(content, (str, bytes)) or not isinstance(content, Iterable):
        raise ConfigurationError(
            f"'content' must be a record, a list of records or a producer, "
            f"got {type(content).__name__}"
        )


def _fixed_records(content: Any) -> Iterator[RecordLike]:
    """Records for the collection and single-record content modes."""
    if content is None:
        return
    if _is_record(content):
        yield content
        return
    yield from content


def _call_producer(producer: Any, batch: int) -> Any:
    try:
        return producer(batch)
    except Exception as exc:
        raise ProducerError(f"Producer failed on batch {batch}: {exc}", batch=batch) from exc


def _pull_sync(producer: Any) -> Iterator[RecordLike]:
    batch = 0
    while True:
        result = _call_producer(producer, batch)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise ConfigurationError(
                "Producer returned an awaitable; use output_async() for asynchronous producers"
            )
        records = _batch_records(result)
        if not records:
            return
        yield from records
        batch += 1


async def _pull_async(producer: Any) -> AsyncIterator[list[RecordLike]]:
    batch = 0
    while True:
        result = _call_producer(producer, batch)
        if inspect.isawaitable(result):
            try:
                result = await result
            except Exception as exc:
                raise ProducerError(
                    f"Producer failed on batch {batch}: {exc}", batch=batch
                ) from exc
        records = _batch_records(result)
        if not records:
            return
        yield records
        batch += 1
        await asyncio.sleep(0)


def output(
    config: OutputConfig | Mapping[str, Any],
    *,
    audit_logger: AuditLogger | None = None,
) -> TextSink:
    """Write an EndNote XML document to the configured sink.

    Parameters
    ----------
    config : OutputConfig | Mapping[str, Any]
        Output configuration, or a camelCase options mapping
        (``stream``, ``content``, ``xmlOptions``, ``defaultType``).
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Returns
    -------
    TextSink
        The sink, for chaining.

    Raises
    ------
    ConfigurationError
        If the sink is missing (nothing is written) or the producer
        returns an awaitable.
    UnknownTypeError
        If a record's type has no row in the type table.
    ProducerError
        If the producer raises.
    """
    settings = _coerce_config(config)
    writer = _RecordWriter(settings, audit_logger)
    content = settings.content
    _check_content(content)

    try:
        writer.header()
        records = _pull_sync(content) if callable(content) else _fixed_records(content)
        for record in records:
            writer.write(record)
        writer.footer()
    except (EndNoteXMLError, TypeError) as exc:
        writer.fail(exc)
        raise
    finally:
        writer.close()

    return settings.stream  # type: ignore[return-value]


async def output_async(
    config: OutputConfig | Mapping[str, Any],
    *,
    audit_logger: AuditLogger | None = None,
) -> TextSink:
    """Write an EndNote XML document, awaiting asynchronous producer batches.

    Behaves like ``output``; a producer may also return an awaitable
    resolving to a batch. Batches are requested strictly one after another.

    Parameters
    ----------
    config : OutputConfig | Mapping[str, Any]
        Output configuration or options mapping.
    audit_logger : AuditLogger | None, optional
        Structured event logger.

    Returns
    -------
    TextSink
        The sink, for chaining.
    """
    settings = _coerce_config(config)
    writer = _RecordWriter(settings, audit_logger)
    content = settings.content
    _check_content(content)

    try:
        writer.header()
        if callable(content):
            async for records in _pull_async(content):
                for record in records:
                    writer.write(record)
        else:
            for record in _fixed_records(content):
                writer.write(record)
        writer.footer()
    except (EndNoteXMLError, TypeError) as exc:
        writer.fail(exc)
        raise
    finally:
        writer.close()

    return settings.stream  # type: ignore[return-value]

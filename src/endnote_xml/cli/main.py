"""Command-line interface for endnote-xml.

Provides commands to convert EndNote XML exports to JSONL and back.
"""

import importlib.metadata
import sys
import time
from contextlib import ExitStack
from pathlib import Path

import click

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("endnote-xml")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="endnote-xml")
def cli() -> None:
    """Streaming codec for EndNote XML bibliographic exports.

    Use 'endnote-xml COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output JSONL file path",
)
@click.option(
    "--progress",
    is_flag=True,
    help="Report bytes consumed on stderr",
)
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write structured JSONL audit events to this file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def parse(
    input_path: str,
    output: str,
    progress: bool,
    log_path: str | None,
    verbose: bool,
) -> None:
    """Decode an EndNote XML export to canonical JSONL.

    Records are streamed: only one record is held in memory at a time.

    Examples
    --------
        endnote-xml parse library.xml -o references.jsonl
        endnote-xml parse library.xml -o references.jsonl --progress --log events.jsonl
    """
    from endnote_xml import write_jsonl
    from endnote_xml import parse as decode
    from endnote_xml.audit import AuditLogger
    from endnote_xml.audit.helpers import runtime_versions

    if verbose:
        click.echo(f"Parsing file: {input_path}", err=True)
        click.echo(f"Writing to: {output}", err=True)

    start = time.monotonic()
    with ExitStack() as stack:
        audit = stack.enter_context(AuditLogger(Path(log_path))) if log_path else None
        if audit is not None:
            audit.run_started(
                sys.argv,
                {"input": input_path, "output": output, "versions": runtime_versions()},
            )

        try:
            f = stack.enter_context(Path(input_path).open("rb"))
            stream = decode(f, audit_logger=audit)
            if progress:
                stream.on(
                    "progress",
                    lambda offset, total: click.echo(
                        f"  {offset}/{total if total is not None else '?'} bytes", err=True
                    ),
                )

            count = write_jsonl(stream.references(), output)
        except Exception as e:
            if audit is not None:
                audit.run_finished("failed", time.monotonic() - start)
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)

        if audit is not None:
            audit.run_finished("success", time.monotonic() - start, records_processed=count)

    click.secho(f"✓ Successfully wrote {count} records to {output}", fg="green")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output EndNote XML file path",
)
@click.option(
    "--file-name",
    type=str,
    default="EndNote.enl",
    help="EndNote database filename recorded in each record (default: EndNote.enl)",
)
@click.option(
    "--default-type",
    type=str,
    default="report",
    help="Reference type for records without one (default: report)",
)
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write structured JSONL audit events to this file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def write(
    input_path: str,
    output: str,
    file_name: str,
    default_type: str,
    log_path: str | None,
    verbose: bool,
) -> None:
    """Encode canonical JSONL references as an EndNote XML document.

    Examples
    --------
        endnote-xml write references.jsonl -o library.xml
        endnote-xml write references.jsonl -o library.xml --default-type journalArticle
    """
    from endnote_xml import read_jsonl, write_file
    from endnote_xml.audit import AuditLogger
    from endnote_xml.audit.helpers import runtime_versions

    start = time.monotonic()
    with ExitStack() as stack:
        audit = stack.enter_context(AuditLogger(Path(log_path))) if log_path else None
        if audit is not None:
            audit.run_started(
                sys.argv,
                {
                    "input": input_path,
                    "output": output,
                    "file_name": file_name,
                    "default_type": default_type,
                    "versions": runtime_versions(),
                },
            )

        try:
            references = read_jsonl(input_path)
            if verbose:
                click.echo(f"Found {len(references)} records", err=True)
                click.echo(f"Writing to: {output}", err=True)

            write_file(
                references,
                output,
                file_name=file_name,
                default_type=default_type,
                audit_logger=audit,
            )
        except Exception as e:
            if audit is not None:
                audit.run_finished("failed", time.monotonic() - start)
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)

        if audit is not None:
            audit.run_finished(
                "success", time.monotonic() - start, records_processed=len(references)
            )

    click.secho(f"✓ Successfully wrote {len(references)} records to {output}", fg="green")


if __name__ == "__main__":
    cli()

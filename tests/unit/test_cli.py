"""Tests for CLI module."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from endnote_xml.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Provide Click test CLI runner."""
    return CliRunner()


# ---------------------------------------------------------------------------
# Top-level CLI
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_cli_version_flag(runner: CliRunner) -> None:
    """Test --version flag outputs version string."""
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "endnote-xml" in result.output


@pytest.mark.unit
def test_cli_help(runner: CliRunner) -> None:
    """Test --help output lists commands."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "parse" in result.output
    assert "write" in result.output


@pytest.mark.unit
def test_cli_invalid_command(runner: CliRunner) -> None:
    """Test invalid command returns non-zero exit code."""
    result = runner.invoke(cli, ["invalid-command"])

    assert result.exit_code != 0


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_parse_help(runner: CliRunner) -> None:
    """Test parse command help."""
    result = runner.invoke(cli, ["parse", "--help"])

    assert result.exit_code == 0
    assert "Decode an EndNote XML export" in result.output


@pytest.mark.unit
def test_parse_file(runner: CliRunner, tmp_path: Path, small_xml_path: Path) -> None:
    """Test parse command writes one JSON line per record."""
    output_file = tmp_path / "output.jsonl"

    result = runner.invoke(cli, ["parse", str(small_xml_path), "-o", str(output_file)])

    assert result.exit_code == 0, result.output
    assert "Successfully wrote 3 records" in result.output
    lines = output_file.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["recNumber"] for line in lines] == ["101", "102", "103"]


@pytest.mark.unit
def test_parse_progress_and_log(runner: CliRunner, tmp_path: Path, small_xml_path: Path) -> None:
    """Test --progress reports bytes and --log writes audit events."""
    output_file = tmp_path / "output.jsonl"
    log_file = tmp_path / "events.jsonl"
    size = small_xml_path.stat().st_size

    result = runner.invoke(
        cli,
        [
            "parse",
            str(small_xml_path),
            "-o",
            str(output_file),
            "--progress",
            "--log",
            str(log_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert f"{size}/{size} bytes" in result.output

    events = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert events[0]["event"] == "run_started"
    assert events[-1]["event"] == "run_finished"
    assert events[-1]["data"]["status"] == "success"
    assert events[-1]["data"]["records_processed"] == 3


@pytest.mark.unit
def test_parse_invalid_input(runner: CliRunner, tmp_path: Path) -> None:
    """Test parse reports decode errors and exits non-zero."""
    bad = tmp_path / "bad.xml"
    bad.write_text("blah blah blah")

    result = runner.invoke(cli, ["parse", str(bad), "-o", str(tmp_path / "out.jsonl")])

    assert result.exit_code == 1
    assert "Error:" in result.output


@pytest.mark.unit
def test_parse_missing_input(runner: CliRunner, tmp_path: Path) -> None:
    """Test a missing input file is rejected by argument validation."""
    result = runner.invoke(cli, ["parse", str(tmp_path / "nope.xml"), "-o", "out.jsonl"])

    assert result.exit_code != 0


# ---------------------------------------------------------------------------
# write command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_write_file(runner: CliRunner, tmp_path: Path) -> None:
    """Test write command encodes JSONL references."""
    input_file = tmp_path / "refs.jsonl"
    input_file.write_text(
        json.dumps({"title": "Hello World", "authors": ["Joe Random"], "volume": 1}) + "\n",
        encoding="utf-8",
    )
    output_file = tmp_path / "out.xml"

    result = runner.invoke(
        cli,
        ["write", str(input_file), "-o", str(output_file), "--file-name", "Cli.enl"],
    )

    assert result.exit_code == 0, result.output
    assert "Successfully wrote 1 records" in result.output
    xml = output_file.read_text(encoding="utf-8")
    assert '<database name="Cli.enl"' in xml
    assert '<ref-type name="Report">27</ref-type>' in xml


@pytest.mark.unit
def test_write_unknown_default_type(runner: CliRunner, tmp_path: Path) -> None:
    """Test an unknown default type is reported as an error."""
    input_file = tmp_path / "refs.jsonl"
    input_file.write_text('{"title": "T"}\n', encoding="utf-8")

    result = runner.invoke(
        cli,
        ["write", str(input_file), "-o", str(tmp_path / "out.xml"), "--default-type", "zine"],
    )

    assert result.exit_code == 1
    assert "Unknown or unsupported reference type: zine" in result.output


@pytest.mark.integration
def test_parse_then_write(runner: CliRunner, tmp_path: Path, small_xml_path: Path) -> None:
    """Test the CLI round trip preserves records."""
    jsonl = tmp_path / "refs.jsonl"
    xml = tmp_path / "copy.xml"

    assert runner.invoke(cli, ["parse", str(small_xml_path), "-o", str(jsonl)]).exit_code == 0
    assert runner.invoke(cli, ["write", str(jsonl), "-o", str(xml)]).exit_code == 0

    from endnote_xml import parse_file

    assert parse_file(xml) == parse_file(small_xml_path)

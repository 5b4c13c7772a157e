"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from endnote_xml.models import Reference  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class RecordingSink:
    """Text sink that keeps everything written, even after close()."""

    def __init__(self) -> None:
        self.chunks: list[str] = []
        self.closed = False

    def write(self, text: str) -> int:
        if self.closed:
            raise ValueError("write to closed sink")
        self.chunks.append(text)
        return len(text)

    def close(self) -> None:
        self.closed = True

    def getvalue(self) -> str:
        return "".join(self.chunks)


@pytest.fixture
def sink() -> RecordingSink:
    """Fresh recording sink."""
    return RecordingSink()


@pytest.fixture
def small_xml_path() -> Path:
    """Three-record EndNote export."""
    return FIXTURES_DIR / "endnote_small.xml"


@pytest.fixture
def small_xml_bytes(small_xml_path: Path) -> bytes:
    """Raw bytes of the three-record export."""
    return small_xml_path.read_bytes()


@pytest.fixture
def make_reference() -> Callable[..., Reference]:
    """Factory for references with a title and type by default."""

    def _factory(**fields: Any) -> Reference:
        fields.setdefault("type", "journalArticle")
        fields.setdefault("title", "A Title")
        return Reference(**fields)

    return _factory


def _wrap_records(*records: str) -> bytes:
    body = "".join(records)
    return f'<?xml version="1.0" encoding="UTF-8"?><xml><records>{body}</records></xml>'.encode()


@pytest.fixture
def wrap() -> Callable[..., bytes]:
    """Build a minimal EndNote document around raw ``<record>`` markup."""
    return _wrap_records

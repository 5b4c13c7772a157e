"""Tests for decode and output configuration."""

import io

import pytest

from endnote_xml.config import DEFAULT_CHUNK_SIZE, DecodeOptions, OutputConfig, XmlOptions
from endnote_xml.errors import ConfigurationError


@pytest.mark.unit
def test_decode_options_defaults() -> None:
    """Test the default chunk size."""
    assert DecodeOptions().chunk_size == DEFAULT_CHUNK_SIZE == 65536


@pytest.mark.unit
@pytest.mark.parametrize("size", [0, -1])
def test_decode_options_reject_non_positive(size: int) -> None:
    """Test chunk sizes must be positive."""
    with pytest.raises(ConfigurationError, match="chunk_size"):
        DecodeOptions(chunk_size=size)


@pytest.mark.unit
def test_output_config_defaults() -> None:
    """Test output defaults match EndNote conventions."""
    config = OutputConfig(stream=io.StringIO())

    assert config.xml_options == XmlOptions(file="EndNote.enl")
    assert config.default_type == "report"
    assert config.close_stream is True
    assert config.content is None


@pytest.mark.unit
def test_output_config_requires_stream() -> None:
    """Test a missing stream is a configuration error."""
    with pytest.raises(ConfigurationError, match="stream"):
        OutputConfig()


@pytest.mark.unit
def test_output_config_requires_writable_stream() -> None:
    """Test a stream without write() is rejected."""
    with pytest.raises(ConfigurationError, match="write"):
        OutputConfig(stream=object())  # type: ignore[arg-type]


@pytest.mark.unit
def test_output_config_rejects_empty_default_type() -> None:
    """Test the default type must be non-empty."""
    with pytest.raises(ConfigurationError, match="default_type"):
        OutputConfig(stream=io.StringIO(), default_type="")


@pytest.mark.unit
def test_from_options_reads_camel_case() -> None:
    """Test camelCase option names map onto the dataclass."""
    stream = io.StringIO()
    config = OutputConfig.from_options(
        {
            "stream": stream,
            "content": [{"title": "T"}],
            "xmlOptions": {"file": "Other.enl"},
            "defaultType": "book",
            "closeStream": False,
        }
    )

    assert config.stream is stream
    assert config.xml_options.file == "Other.enl"
    assert config.default_type == "book"
    assert config.close_stream is False


@pytest.mark.unit
def test_xml_options_mapping_is_coerced() -> None:
    """Test a plain mapping for xml_options becomes XmlOptions."""
    config = OutputConfig(stream=io.StringIO(), xml_options={"file": "X.enl"})  # type: ignore[arg-type]

    assert config.xml_options == XmlOptions(file="X.enl")


@pytest.mark.unit
def test_to_dict() -> None:
    """Test serializable settings export."""
    config = OutputConfig(stream=io.StringIO(), default_type="book")

    assert config.to_dict() == {
        "xml_options": {"file": "EndNote.enl"},
        "default_type": "book",
        "close_stream": True,
    }

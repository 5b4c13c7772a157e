"""Tests for audit helpers module."""

import pytest

from endnote_xml.audit.helpers import (
    generate_run_id,
    get_dependency_versions,
    get_package_version,
    runtime_versions,
)


@pytest.mark.unit
def test_generate_run_id_format_and_uniqueness() -> None:
    """Test run ID has correct format and successive calls are unique."""
    rid1 = generate_run_id()
    rid2 = generate_run_id()

    # Format: ISO8601__hex8
    parts = rid1.split("__")
    assert len(parts) == 2
    assert parts[0].endswith("Z")
    assert len(parts[1]) == 8

    assert rid1 != rid2


@pytest.mark.unit
def test_get_package_version() -> None:
    """Test package version is either semver or 'unknown' when not installed."""
    version = get_package_version()
    assert version == "unknown" or "." in version


@pytest.mark.unit
def test_get_dependency_versions() -> None:
    """Test known packages return versions, unknown return 'unknown'."""
    versions = get_dependency_versions(["pytest", "nonexistent_xyz_pkg"])

    assert "." in versions["pytest"]
    assert versions["nonexistent_xyz_pkg"] == "unknown"


@pytest.mark.unit
def test_runtime_versions_lists_parsing_libraries() -> None:
    """Test runtime versions cover the package and its XML libraries."""
    versions = runtime_versions()

    assert set(versions) == {"endnote-xml", "lxml", "xmltodict"}
    assert "." in versions["lxml"]

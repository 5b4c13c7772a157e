"""Helper utilities for audit logging.

For timestamp utilities, see endnote_xml.utils.
"""

import importlib.metadata
import secrets
from datetime import UTC, datetime

__all__ = [
    "generate_run_id",
    "get_package_version",
    "get_dependency_versions",
    "runtime_versions",
]


def generate_run_id() -> str:
    """Generate unique run identifier.

    Returns
    -------
    str
        Run ID in format: ISO8601_timestamp__random_suffix.
    """
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    suffix = secrets.token_hex(4)
    return f"{timestamp}__{suffix}"


def get_package_version() -> str:
    """Get endnote-xml package version.

    Returns
    -------
    str
        Package version or "unknown".
    """
    try:
        return importlib.metadata.version("endnote-xml")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_dependency_versions(packages: list[str]) -> dict[str, str]:
    """Get versions of specified packages.

    Parameters
    ----------
    packages : list[str]
        List of package names to query.

    Returns
    -------
    dict[str, str]
        Mapping of package name to version.
    """
    versions: dict[str, str] = {}
    for package in packages:
        try:
            versions[package] = importlib.metadata.version(package)
        except importlib.metadata.PackageNotFoundError:
            versions[package] = "unknown"
    return versions


def runtime_versions() -> dict[str, str]:
    """Versions of this package and its parsing libraries, for run_started events.

    Returns
    -------
    dict[str, str]
        Mapping of distribution name to version.
    """
    return {
        "endnote-xml": get_package_version(),
        **get_dependency_versions(["lxml", "xmltodict"]),
    }

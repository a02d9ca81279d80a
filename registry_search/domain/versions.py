"""
Version parsing and ordering for package version records.

Registry versions follow semantic versioning with two extensions used by
package managers in the wild: an optional fourth (revision) release number
and missing minor/patch numbers ("1.0" means "1.0.0"). Ordering compares the
four release numbers first, then applies semantic-version precedence to the
prerelease labels (case-insensitively). Build metadata never affects order.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Tuple

import semantic_version


_VERSION_RE = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:-([0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+([0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?$"
)


class ParsedVersion(NamedTuple):
    release: Tuple[int, int, int, int]
    prerelease: Tuple[str, ...]
    metadata: Optional[str]


def parse_version(value: str) -> ParsedVersion:
    """
    Split a version string into release numbers, prerelease labels and
    build metadata.

    Raises ValueError for strings that are not versions.
    """
    match = _VERSION_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid version string: {value!r}")

    major, minor, patch, revision, prerelease, metadata = match.groups()
    release = (
        int(major),
        int(minor or 0),
        int(patch or 0),
        int(revision or 0),
    )
    labels = tuple(prerelease.split(".")) if prerelease else ()
    return ParsedVersion(release=release, prerelease=labels, metadata=metadata)


def _prerelease_precedence(labels: Tuple[str, ...]) -> semantic_version.Version:
    # Only the prerelease part matters here; release numbers are compared separately
    # because semantic_version has no notion of a revision number.
    return semantic_version.Version(
        major=0,
        minor=0,
        patch=0,
        prerelease=tuple(label.lower() for label in labels),
    )


def version_key(value: str) -> tuple:
    """
    Sort key giving the total order over version strings.
    """
    parsed = parse_version(value)
    return parsed.release, _prerelease_precedence(parsed.prerelease)


def normalize_version(value: str) -> str:
    """
    Normalized form: three release numbers (four when the revision is not
    zero), the prerelease labels, and no build metadata.
    """
    parsed = parse_version(value)
    major, minor, patch, revision = parsed.release
    normalized = f"{major}.{minor}.{patch}"
    if revision:
        normalized += f".{revision}"
    if parsed.prerelease:
        normalized += "-" + ".".join(parsed.prerelease)
    return normalized


def is_prerelease_version(value: str) -> bool:
    return bool(parse_version(value).prerelease)


def is_semver2_version(value: str) -> bool:
    """
    A version needs SemVer 2.0.0 aware clients when its prerelease label is
    dotted or it carries build metadata.
    """
    parsed = parse_version(value)
    return len(parsed.prerelease) > 1 or parsed.metadata is not None


def max_version(values):
    """Highest version string of a non-empty iterable."""
    return max(values, key=version_key)

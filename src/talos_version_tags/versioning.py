"""Semantic version ordering for release tags."""

from functools import cmp_to_key
from typing import Optional

import semver


def parse_version(version: str) -> Optional[semver.Version]:
    """Parse a ``v``-prefixed semantic version.

    ``vMAJOR`` and ``vMAJOR.MINOR`` are accepted as shorthands for
    ``vMAJOR.0.0`` and ``vMAJOR.MINOR.0``.

    Args:
        version: Version string (e.g., "v1.7.0-beta.1")

    Returns:
        Parsed version, or None if the string is not a valid version
    """
    if not isinstance(version, str) or not version.startswith("v"):
        return None

    try:
        return semver.Version.parse(version[1:], optional_minor_and_patch=True)
    except ValueError:
        return None


def is_valid(version: str) -> bool:
    """Check if a string is a valid ``v``-prefixed semantic version."""
    return parse_version(version) is not None


def compare(a: str, b: str) -> int:
    """Compare two version strings by semantic version precedence.

    Malformed strings sort before every valid version and are equal to
    each other. Build metadata does not take part in the ordering.

    Args:
        a: First version string
        b: Second version string

    Returns:
        -1 if a < b, 0 if a == b, 1 if a > b
    """
    va = parse_version(a)
    vb = parse_version(b)

    if va is None and vb is None:
        return 0
    if va is None:
        return -1
    if vb is None:
        return 1

    return va.compare(vb)


version_key = cmp_to_key(compare)

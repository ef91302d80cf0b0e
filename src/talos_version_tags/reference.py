"""Image reference parsing and canonical rendering."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from .exceptions import ParseError

logger = logging.getLogger(__name__)

# registry/org/repo[:tag][@sha256:shasum]; org may span several path components
IMAGE_REFERENCE_PATTERN = re.compile(
    r"(?P<registry>[a-zA-Z0-9.-]+(?::[0-9]+)?)"
    r"/(?P<org>[a-z0-9._-]+(?:/[a-z0-9._-]+)*)"
    r"/(?P<repo>[a-z0-9._-]+)"
    r"(?::(?P<tag>[a-zA-Z0-9_][a-zA-Z0-9._-]{0,127}))?"
    r"(?:@sha256:(?P<shasum>[a-f0-9]+))?"
)


@dataclass(frozen=True)
class TrimOptions:
    """Which parts of an image reference to drop when rendering it."""

    minimal: bool = False
    trim_registry: bool = False
    trim_sha256: bool = False
    trim_tag: bool = False

    @property
    def is_minimal(self) -> bool:
        """True when only org/repo is rendered."""
        return self.minimal or (self.trim_registry and self.trim_sha256 and self.trim_tag)


@dataclass(frozen=True)
class ImageReference:
    """Named parts of an image reference; absent parts are empty strings."""

    registry: str = ""
    org: str = ""
    repo: str = ""
    tag: str = ""
    shasum: str = ""

    def render(self, options: TrimOptions) -> str:
        """Render the reference with the parts selected by ``options``.

        Absent parts are substituted as empty strings, so a reference
        without a tag still renders its ":" separator when the tag is kept.
        """
        name = f"{self.org}/{self.repo}"

        if options.is_minimal:
            logger.debug("returning minimal reference")
            return name

        if options.trim_registry and options.trim_sha256:
            logger.debug("returning trimmed registry and sha256")
            return f"{name}:{self.tag}"

        if options.trim_registry:
            if options.trim_tag:
                logger.debug("returning trimmed registry and tag")
                return f"{name}@sha256:{self.shasum}"
            logger.debug("returning trimmed registry")
            return f"{name}:{self.tag}@sha256:{self.shasum}"

        name = f"{self.registry}/{name}"

        if options.trim_sha256:
            if options.trim_tag:
                logger.debug("returning trimmed sha256 and tag")
                return name
            logger.debug("returning trimmed sha256")
            return f"{name}:{self.tag}"

        if options.trim_tag:
            logger.debug("returning trimmed tag")
            return f"{name}@sha256:{self.shasum}"

        logger.debug("returning full reference")
        return f"{name}:{self.tag}@sha256:{self.shasum}"


def parse_image_reference(reference: str) -> ImageReference:
    """Split an image reference into registry, org, repo, tag and shasum.

    Args:
        reference: Reference such as
            "ghcr.io/siderolabs/gvisor:20231214.0-v1.6.0@sha256:548b2b..."

    Returns:
        Parsed reference

    Raises:
        ParseError: If the reference is not of the form registry/org/repo
    """
    match = IMAGE_REFERENCE_PATTERN.fullmatch(reference.strip())
    if match is None:
        raise ParseError(f"Invalid image reference: {reference!r}")

    fields = {name: value or "" for name, value in match.groupdict().items()}
    logger.debug("regexp matches: %s", fields)
    return ImageReference(**fields)


def canonicalize(reference: str, options: TrimOptions) -> str:
    """Parse a reference and render it under ``options``.

    Raises:
        ParseError: If the reference cannot be parsed
    """
    return parse_image_reference(reference).render(options)


def clean_lines(lines: Iterable[str], options: TrimOptions) -> list[str]:
    """Canonicalize every non-blank line of an image listing.

    Raises:
        ParseError: If a line is not a valid image reference
    """
    return [canonicalize(line, options) for line in lines if line.strip()]

"""Example usage of the version resolution API."""

import asyncio
import logging
import sys

# Add parent directory to path
sys.path.insert(0, "src")

from talos_version_tags import (
    RegistryError,
    TalosVersionTags,
    TrimOptions,
    canonicalize,
    get_missing_tags,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    """Resolve releases missing from an empty cache."""
    try:
        missing = await get_missing_tags(TalosVersionTags())
    except RegistryError as e:
        logger.error(f"Registry error: {e}")
        return

    logger.info(f"Found {len(missing)} releases")
    for version in missing.version_strings()[-5:]:
        logger.info(f"  {version}")


async def with_deadline(seconds: float):
    """Bound a resolution cycle with a caller-side deadline."""
    try:
        missing = await asyncio.wait_for(get_missing_tags(TalosVersionTags()), seconds)
        logger.info(f"Resolved {len(missing)} releases within {seconds}s")
    except asyncio.TimeoutError:
        logger.warning(f"Registry did not answer within {seconds}s")
    except RegistryError as e:
        logger.error(f"Registry error: {e}")


def show_trim_options():
    """Render one reference under every trim flag combination."""
    reference = "ghcr.io/siderolabs/gvisor:20231214.0-v1.6.0@sha256:548b2b"
    for options in [
        TrimOptions(),
        TrimOptions(trim_registry=True),
        TrimOptions(trim_sha256=True),
        TrimOptions(trim_tag=True),
        TrimOptions(minimal=True),
    ]:
        logger.info(f"{options}: {canonicalize(reference, options)}")


if __name__ == "__main__":
    print("=== Missing Releases ===")
    asyncio.run(main())

    print("\n=== Caller Deadline ===")
    asyncio.run(with_deadline(10))

    print("\n=== Trim Options ===")
    show_trim_options()

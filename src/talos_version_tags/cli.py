"""Command line entry point: update the version cache from the registry."""

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from .cache import save_cache
from .constants import (
    CACHE_FILE_ENV,
    DEFAULT_CACHE_FILE,
    DEFAULT_PLATFORM,
    DEFAULT_REPOSITORY,
    DEFAULT_TIMEOUT,
    REPOSITORY_ENV,
)
from .core.types import Platform
from .exceptions import RegistryError, TalosVersionTagsError
from .extensions import populate_system_extensions
from .reference import TrimOptions
from .resolver import get_missing_versions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="talos-version-tags",
        description="Record new Talos releases and their system extensions.",
    )
    parser.add_argument(
        "--cache-file",
        default=os.environ.get(CACHE_FILE_ENV, DEFAULT_CACHE_FILE),
        help="JSON cache of known versions (default: %(default)s).",
    )
    parser.add_argument(
        "--repository",
        default=os.environ.get(REPOSITORY_ENV, DEFAULT_REPOSITORY),
        help="Repository whose tags are releases (default: %(default)s).",
    )
    parser.add_argument(
        "--minimal",
        action="store_true",
        help="Record extensions as org/repo only.",
    )
    parser.add_argument(
        "--trim-registry",
        action="store_true",
        help="Drop the registry host from extension references.",
    )
    parser.add_argument(
        "--trim-sha256",
        action="store_true",
        help="Drop the sha256 digest from extension references.",
    )
    parser.add_argument(
        "--trim-tag",
        action="store_true",
        help="Drop the tag from extension references.",
    )
    parser.add_argument(
        "--no-extensions",
        action="store_true",
        help="Record new versions without looking up their extensions.",
    )
    parser.add_argument(
        "--platform",
        default=DEFAULT_PLATFORM,
        help="Platform to read from multi-arch images (default: %(default)s).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help="Registry request timeout in seconds (default: %(default)s).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print new versions without writing the cache file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def trim_options_from_args(args: argparse.Namespace) -> TrimOptions:
    return TrimOptions(
        minimal=args.minimal,
        trim_registry=args.trim_registry,
        trim_sha256=args.trim_sha256,
        trim_tag=args.trim_tag,
    )


async def run(args: argparse.Namespace) -> int:
    options = trim_options_from_args(args)
    platform = Platform.parse(args.platform)

    cached, missing = await get_missing_versions(
        args.cache_file, args.repository, timeout=args.timeout
    )
    if not len(missing):
        logger.info("cache %s is up to date", args.cache_file)
        return 0

    if not args.no_extensions:
        await populate_system_extensions(
            missing, options, args.repository, timeout=args.timeout, platform=platform
        )

    for entry in missing:
        print(f"{entry.version}\t{len(entry.system_extensions)} extensions")

    if args.dry_run:
        return 0

    await save_cache(args.cache_file, cached.merge(missing))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return asyncio.run(run(args))
    except RegistryError as e:
        print(f"Error fetching tags: {e}", file=sys.stderr)
        return 1
    except TalosVersionTagsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Resolution of release tags missing from the version cache."""

import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from .cache import cache_exists, load_cache
from .constants import DEFAULT_REPOSITORY, DEFAULT_TIMEOUT
from .models import TalosVersion, TalosVersionTags
from .registry import list_tags

logger = logging.getLogger(__name__)

TagFetcher = Callable[[str], Awaitable[list[str]]]

RELEASE_TAG_PREFIX = "v"


async def get_missing_tags(
    cached_tags: TalosVersionTags,
    repository: str = DEFAULT_REPOSITORY,
    fetch_tags: Optional[TagFetcher] = None,
) -> TalosVersionTags:
    """Return the upstream release tags that are not in the cache yet.

    Tags without the "v" prefix are not releases and are skipped. The
    result is a new, sorted set whose entries have empty extension lists;
    ``cached_tags`` is never modified.

    Args:
        cached_tags: Releases already known
        repository: Fully qualified repository to list
        fetch_tags: Coroutine listing the tags of a repository
            (default: registry.list_tags)

    Returns:
        New releases sorted ascending; empty if there are none

    Raises:
        RegistryError: If the tags cannot be fetched
    """
    if fetch_tags is None:
        fetch_tags = list_tags

    upstream_tags = await fetch_tags(repository)

    tags_to_append = TalosVersionTags()
    for tag in upstream_tags:
        if not tag.startswith(RELEASE_TAG_PREFIX):
            logger.debug("skipping tag %s", tag)
            continue
        if cached_tags.contains(tag) or tags_to_append.contains(tag):
            continue

        logger.debug("adding new tag %s", tag)
        tags_to_append.append(TalosVersion(version=tag))

    tags_to_append.sort_ascending()
    logger.debug("finalizing list of tags to append: %s", tags_to_append.version_strings())

    return tags_to_append


async def get_missing_versions(
    cache_path: Union[str, Path],
    repository: str = DEFAULT_REPOSITORY,
    timeout: int = DEFAULT_TIMEOUT,
    fetch_tags: Optional[TagFetcher] = None,
) -> tuple[TalosVersionTags, TalosVersionTags]:
    """Load the cache file, if any, and resolve the releases it lacks.

    A missing cache file counts as an empty cache.

    Args:
        cache_path: Path of the JSON cache file
        repository: Fully qualified repository to list
        timeout: Registry request timeout in seconds
        fetch_tags: Coroutine listing the tags of a repository

    Returns:
        (cache, missing) where missing holds only the new releases

    Raises:
        CacheError: If an existing cache file cannot be read
        RegistryError: If the tags cannot be fetched
    """
    if cache_exists(cache_path):
        cached_tags = await load_cache(cache_path)
        logger.info("loaded %d cached versions from %s", len(cached_tags), cache_path)
    else:
        cached_tags = TalosVersionTags()
        logger.info("no cache at %s, starting empty", cache_path)

    if fetch_tags is None:

        async def fetch_tags(name: str) -> list[str]:
            return await list_tags(name, timeout=timeout)

    missing = await get_missing_tags(cached_tags, repository, fetch_tags)
    logger.info("found %d new versions in %s", len(missing), repository)

    return cached_tags, missing

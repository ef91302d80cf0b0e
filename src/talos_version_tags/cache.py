"""Version cache file persistence."""

import json
import logging
import os
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

from .exceptions import CacheError, ValidationError
from .models import TalosVersionTags

logger = logging.getLogger(__name__)


def cache_exists(path: Union[str, Path]) -> bool:
    """Check if a cache file exists."""
    return Path(path).is_file()


async def load_cache(path: Union[str, Path]) -> TalosVersionTags:
    """Load the version cache from a JSON file.

    Args:
        path: Cache file path

    Returns:
        Cached versions in file order

    Raises:
        CacheError: If the file cannot be read or is not a valid cache
    """
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise CacheError(f"Cannot read cache file {path}: {e}") from e

    try:
        return TalosVersionTags.from_dict(json.loads(content))
    except json.JSONDecodeError as e:
        raise CacheError(f"Invalid JSON in cache file {path}: {e}") from e
    except ValidationError as e:
        raise CacheError(f"Invalid cache file {path}: {e}") from e


async def save_cache(path: Union[str, Path], tags: TalosVersionTags) -> None:
    """Write the version cache as JSON.

    The file is written next to its destination and then moved into place,
    so readers never see a partial cache.

    Args:
        path: Cache file path
        tags: Versions to persist, written in their current order

    Raises:
        CacheError: If the file cannot be written
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.tmp")
    content = json.dumps(tags.to_dict(), indent=2) + "\n"

    try:
        if path.parent != Path("."):
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(content)
        await aiofiles.os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path.exists():
            os.unlink(tmp_path)
        raise CacheError(f"Cannot write cache file {path}: {e}") from e

    logger.info("wrote %d versions to %s", len(tags), path)

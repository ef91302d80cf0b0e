"""System extension discovery from the upstream extensions image."""

import logging
from typing import Dict, List, Optional

from .constants import (
    DEFAULT_PLATFORM,
    DEFAULT_REPOSITORY,
    DEFAULT_TIMEOUT,
    IMAGE_DIGESTS_FILE,
    INDEX_MEDIA_TYPES,
)
from .core.registry_client import RegistryClient
from .core.types import Platform, RegistryConfig, RepositoryName
from .exceptions import BlobError, ManifestError
from .models import TalosVersionTags
from .reference import TrimOptions, clean_lines
from .tar.models import LayerDescriptor
from .tar.reader import LayerReader

logger = logging.getLogger(__name__)


def select_platform_manifest(index: Dict, platform: Platform) -> str:
    """Pick the manifest digest matching a platform out of an image index.

    Args:
        index: OCI image index or Docker manifest list
        platform: Wanted platform

    Returns:
        Digest of the matching manifest

    Raises:
        ManifestError: If no entry matches
    """
    for descriptor in index.get("manifests") or []:
        if platform.matches(descriptor.get("platform") or {}):
            return descriptor["digest"]
    raise ManifestError(f"No manifest for platform {platform} in index")


def is_index(manifest: Dict) -> bool:
    """Check if a manifest document is an index / manifest list."""
    return manifest.get("mediaType") in INDEX_MEDIA_TYPES or (
        "manifests" in manifest and "layers" not in manifest
    )


async def fetch_image_digests(
    client: RegistryClient,
    repository: str,
    tag: str,
    platform: Optional[Platform] = None,
) -> Optional[List[str]]:
    """Read the image-digests listing of one extensions image.

    Layers are searched from the top of the image down, so the file from
    the topmost layer that carries it wins.

    Args:
        client: Open registry client
        repository: Repository path (e.g., "siderolabs/extensions")
        tag: Image tag (e.g., "v1.6.0")
        platform: Platform to pick from an index (default: linux/amd64)

    Returns:
        Lines of the listing, or None if the image has no such file

    Raises:
        ManifestError: If the manifest cannot be fetched
        BlobError: If a layer cannot be downloaded or read
    """
    platform = platform or Platform.parse(DEFAULT_PLATFORM)

    manifest = await client.get_manifest(repository, tag)
    if is_index(manifest):
        digest = select_platform_manifest(manifest, platform)
        logger.debug("resolved %s:%s for %s to %s", repository, tag, platform, digest)
        manifest = await client.get_manifest(repository, digest)

    layers = [LayerDescriptor.from_dict(layer) for layer in manifest.get("layers") or []]
    for layer in reversed(layers):
        blob = await client.get_blob(repository, layer.digest)
        async with LayerReader(blob, layer.digest) as reader:
            content = await reader.read_file(IMAGE_DIGESTS_FILE)
        if content is not None:
            try:
                return content.decode("utf-8").splitlines()
            except UnicodeDecodeError as e:
                raise BlobError(
                    f"Cannot decode {IMAGE_DIGESTS_FILE} in {repository}:{tag}: {e}"
                ) from e

    return None


async def get_system_extensions(
    client: RegistryClient,
    repository: str,
    version: str,
    options: TrimOptions,
    platform: Optional[Platform] = None,
) -> List[str]:
    """List the canonicalized extension images published for a release.

    Raises:
        RegistryError: If the extensions image cannot be read
        ParseError: If the listing contains an invalid reference
    """
    lines = await fetch_image_digests(client, repository, version, platform)
    if lines is None:
        logger.warning("%s:%s has no %s file", repository, version, IMAGE_DIGESTS_FILE)
        return []

    return clean_lines(lines, options)


async def populate_system_extensions(
    tags: TalosVersionTags,
    options: TrimOptions,
    repository: str = DEFAULT_REPOSITORY,
    timeout: int = DEFAULT_TIMEOUT,
    platform: Optional[Platform] = None,
) -> None:
    """Fill in the extension list of every release in ``tags``.

    Args:
        tags: Releases to update in place, normally a freshly resolved delta
        options: Trim options for rendering extension references
        repository: Fully qualified extensions repository
        timeout: Registry request timeout in seconds
        platform: Platform to pick from an index (default: linux/amd64)

    Raises:
        RegistryError: If an extensions image cannot be read
        ParseError: If a listing contains an invalid reference
    """
    if not len(tags):
        return

    name = RepositoryName.parse(repository)
    config = RegistryConfig.for_host(name.registry, timeout=timeout)

    async with RegistryClient(config) as client:
        for entry in tags:
            entry.system_extensions = await get_system_extensions(
                client, name.repository, entry.version, options, platform
            )
            logger.info(
                "%s: %d system extensions", entry.version, len(entry.system_extensions)
            )

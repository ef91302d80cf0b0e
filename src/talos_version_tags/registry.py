"""Async functional registry operations."""

import logging
from typing import Any

from .constants import DEFAULT_TIMEOUT
from .core.registry_client import RegistryClient
from .core.types import RegistryConfig, RepositoryName

logger = logging.getLogger(__name__)


async def list_tags(repository_name: str, timeout: int = DEFAULT_TIMEOUT) -> list[str]:
    """List every tag currently published for a repository.

    Args:
        repository_name: Fully qualified repository name without tag
            (e.g., "ghcr.io/siderolabs/extensions")
        timeout: Request timeout in seconds (default: 30)

    Returns:
        list[str]: Tag names in the order the registry reports them
            (e.g., ["v1.6.0", "v1.6.1", "latest"])

    Raises:
        ValidationError: If the repository name is malformed
        RegistryError: If the registry cannot be reached or the request fails

    Examples:
        tags = await list_tags("ghcr.io/siderolabs/extensions")
        print(f"{len(tags)} tags published")
    """
    name = RepositoryName.parse(repository_name)
    config = RegistryConfig.for_host(name.registry, timeout=timeout)

    logger.debug("calling registry docker://%s...", name)
    async with RegistryClient(config) as client:
        return await client.list_tags(name.repository)


async def get_manifest(
    repository_name: str, reference: str, timeout: int = DEFAULT_TIMEOUT
) -> dict[str, Any]:
    """Fetch the manifest of one image.

    Args:
        repository_name: Fully qualified repository name without tag
        reference: Tag or digest (e.g., "v1.6.0", "sha256:...")
        timeout: Request timeout in seconds (default: 30)

    Returns:
        dict[str, Any]: Manifest or index document

    Raises:
        ValidationError: If the repository name is malformed
        ManifestError: If the manifest cannot be fetched

    Examples:
        manifest = await get_manifest("ghcr.io/siderolabs/extensions", "v1.6.0")
        print(manifest["mediaType"])
    """
    name = RepositoryName.parse(repository_name)
    config = RegistryConfig.for_host(name.registry, timeout=timeout)

    async with RegistryClient(config) as client:
        return await client.get_manifest(name.repository, reference)


async def check_registry_connectivity(registry_url: str, timeout: int = DEFAULT_TIMEOUT) -> bool:
    """Check whether a registry answers the v2 API.

    Args:
        registry_url: Registry URL (e.g., "https://ghcr.io", "http://localhost:5000")
        timeout: Request timeout in seconds (default: 30)

    Returns:
        bool: True if the registry serves /v2/

    Examples:
        if await check_registry_connectivity("https://ghcr.io"):
            print("registry reachable")
    """
    config = RegistryConfig(url=registry_url, timeout=timeout)
    async with RegistryClient(config) as client:
        return await client.check_registry_v2()

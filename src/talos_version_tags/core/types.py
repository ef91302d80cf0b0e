"""Value types shared by the registry client and its callers."""

import ipaddress
import re
from dataclasses import dataclass
from typing import Optional

from ..constants import DEFAULT_TIMEOUT
from ..exceptions import ValidationError

DOCKER_HUB_REGISTRY = "index.docker.io"

# Repository path components (e.g., "siderolabs/extensions")
REPOSITORY_PATH_PATTERN = re.compile(
    r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*(?:/[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*)*$"
)


def _strip_port(host: str) -> str:
    if host.startswith("["):
        return host[1 : host.index("]")] if "]" in host else host
    return host.rsplit(":", 1)[0] if host.count(":") == 1 else host


def is_insecure_host(host: str) -> bool:
    """Check if a registry host is reached over plain http.

    Localhost, loopback and private (RFC 1918) addresses are served over
    http; every other host uses https.
    """
    hostname = _strip_port(host)
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return True

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False

    return address.is_loopback or address.is_private


@dataclass(frozen=True)
class RegistryConfig:
    """Connection settings for one registry."""

    url: str
    timeout: int = DEFAULT_TIMEOUT
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def for_host(cls, host: str, **kwargs) -> "RegistryConfig":
        """Create a config for a bare registry host (e.g., "ghcr.io")."""
        scheme = "http" if is_insecure_host(host) else "https"
        return cls(url=f"{scheme}://{host}", **kwargs)

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")


@dataclass(frozen=True)
class RepositoryName:
    """A fully qualified repository name without tag or digest."""

    registry: str
    repository: str

    @classmethod
    def parse(cls, name: str) -> "RepositoryName":
        """Split "registry/org/repo" into registry host and repository path.

        A first component without a dot or port (and not "localhost")
        is not a registry host; such names resolve against Docker Hub.

        Raises:
            ValidationError: If the name is empty, carries a tag or digest,
                or has an invalid repository path
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Repository name must be a non-empty string")

        name = name.strip()
        if "@" in name:
            raise ValidationError(f"Repository name must not carry a digest: {name}")

        parts = name.split("/")
        first = parts[0]
        if len(parts) > 1 and ("." in first or ":" in first or first == "localhost"):
            registry, path = first, "/".join(parts[1:])
        else:
            registry, path = DOCKER_HUB_REGISTRY, name
            if len(parts) == 1:
                path = f"library/{name}"

        if ":" in path:
            raise ValidationError(f"Repository name must not carry a tag: {name}")
        if not REPOSITORY_PATH_PATTERN.match(path):
            raise ValidationError(f"Invalid repository name: {name}")

        return cls(registry=registry, repository=path)

    def __str__(self) -> str:
        return f"{self.registry}/{self.repository}"


@dataclass(frozen=True)
class Platform:
    """Image platform used to pick a manifest out of an index."""

    os: str = "linux"
    architecture: str = "amd64"
    variant: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Parse "os/arch[/variant]".

        Raises:
            ValidationError: If the string has fewer than two components
        """
        parts = value.split("/")
        if len(parts) < 2 or len(parts) > 3 or not all(parts):
            raise ValidationError(f"Invalid platform: {value}")
        return cls(
            os=parts[0],
            architecture=parts[1],
            variant=parts[2] if len(parts) == 3 else None,
        )

    def matches(self, descriptor_platform: dict) -> bool:
        """Check if an index entry's platform object matches."""
        if descriptor_platform.get("os") != self.os:
            return False
        if descriptor_platform.get("architecture") != self.architecture:
            return False
        if self.variant is not None:
            return descriptor_platform.get("variant") == self.variant
        return True

    def __str__(self) -> str:
        base = f"{self.os}/{self.architecture}"
        return f"{base}/{self.variant}" if self.variant else base

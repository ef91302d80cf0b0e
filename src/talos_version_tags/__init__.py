"""talos-version-tags - track Talos releases and their system extensions."""

__version__ = "0.1.0"

from .cache import cache_exists, load_cache, save_cache
from .core.registry_client import RegistryClient
from .core.types import Platform, RegistryConfig, RepositoryName
from .exceptions import (
    BlobError,
    CacheError,
    ManifestError,
    ParseError,
    RegistryAuthError,
    RegistryConnectionError,
    RegistryError,
    TalosVersionTagsError,
    ValidationError,
)
from .extensions import get_system_extensions, populate_system_extensions
from .models import TalosVersion, TalosVersionTags
from .reference import (
    ImageReference,
    TrimOptions,
    canonicalize,
    clean_lines,
    parse_image_reference,
)
from .registry import check_registry_connectivity, get_manifest, list_tags
from .resolver import get_missing_tags, get_missing_versions
from .versioning import compare

__all__ = [
    # Registry
    "RegistryClient",
    "RegistryConfig",
    "RepositoryName",
    "Platform",
    "list_tags",
    "get_manifest",
    "check_registry_connectivity",
    # Versions
    "TalosVersion",
    "TalosVersionTags",
    "compare",
    "get_missing_tags",
    "get_missing_versions",
    "get_system_extensions",
    "populate_system_extensions",
    # Cache
    "cache_exists",
    "load_cache",
    "save_cache",
    # References
    "ImageReference",
    "TrimOptions",
    "canonicalize",
    "clean_lines",
    "parse_image_reference",
    # Errors
    "TalosVersionTagsError",
    "RegistryError",
    "RegistryConnectionError",
    "RegistryAuthError",
    "ManifestError",
    "BlobError",
    "ValidationError",
    "ParseError",
    "CacheError",
]

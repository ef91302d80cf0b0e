"""Registry client building blocks."""

from .registry_client import RegistryClient
from .types import Platform, RegistryConfig, RepositoryName

__all__ = ["RegistryClient", "RegistryConfig", "RepositoryName", "Platform"]

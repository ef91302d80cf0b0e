"""Custom exceptions for talos-version-tags."""


class TalosVersionTagsError(Exception):
    """Base exception for all talos-version-tags errors."""

    pass


class RegistryError(TalosVersionTagsError):
    """Base exception for all registry-related errors."""

    pass


class RegistryConnectionError(RegistryError):
    """Raised when unable to connect to the registry."""

    pass


class RegistryAuthError(RegistryError):
    """Raised when the registry rejects or cannot issue credentials."""

    pass


class ManifestError(RegistryError):
    """Raised when manifest operations fail."""

    pass


class BlobError(RegistryError):
    """Raised when a blob cannot be downloaded or read."""

    pass


class ValidationError(TalosVersionTagsError):
    """Raised when an input value is malformed."""

    pass


class ParseError(ValidationError):
    """Raised when an image reference does not match the reference grammar."""

    pass


class CacheError(TalosVersionTagsError):
    """Raised when the version cache cannot be read or written."""

    pass

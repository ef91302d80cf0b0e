"""Data models for release versions and their system extensions."""

from dataclasses import dataclass, field
from typing import Any, Iterator, List

from .exceptions import ValidationError
from .versioning import version_key


@dataclass
class TalosVersion:
    """A Talos release and the system extensions available for it."""

    version: str
    system_extensions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the cache file field names."""
        return {
            "version": self.version,
            "systemExtensions": list(self.system_extensions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TalosVersion":
        """Build a version entry from its cache file representation.

        Raises:
            ValidationError: If the entry has no version string
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Version entry must be an object: {data!r}")

        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ValidationError(f"Version entry has no version: {data!r}")

        extensions = data.get("systemExtensions") or []
        if not isinstance(extensions, list):
            raise ValidationError(f"systemExtensions must be a list for {version}")

        return cls(version=version, system_extensions=[str(e) for e in extensions])


@dataclass
class TalosVersionTags:
    """Known releases, keyed by version string."""

    versions: List[TalosVersion] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.versions)

    def __iter__(self) -> Iterator[TalosVersion]:
        return iter(self.versions)

    def __contains__(self, version: object) -> bool:
        return isinstance(version, str) and self.contains(version)

    def contains(self, version: str) -> bool:
        """Check if a release with exactly this version string is present."""
        return any(v.version == version for v in self.versions)

    def version_strings(self) -> list[str]:
        """Return the version strings in their current order."""
        return [v.version for v in self.versions]

    def append(self, version: TalosVersion) -> None:
        """Append a release, rejecting duplicate versions.

        Raises:
            ValidationError: If the version is already present
        """
        if self.contains(version.version):
            raise ValidationError(f"Duplicate version: {version.version}")
        self.versions.append(version)

    def sort_ascending(self) -> None:
        """Sort releases in place by semantic version.

        The sort is stable and only looks at the version string.
        """
        self.versions.sort(key=lambda v: version_key(v.version))

    def merge(self, other: "TalosVersionTags") -> "TalosVersionTags":
        """Combine two sets into a new, sorted set.

        Entries of ``self`` win over entries of ``other`` with the same
        version. Neither input is modified.
        """
        merged = TalosVersionTags(
            versions=[
                TalosVersion(v.version, list(v.system_extensions))
                for v in self.versions
            ]
        )
        for v in other.versions:
            if not merged.contains(v.version):
                merged.versions.append(
                    TalosVersion(v.version, list(v.system_extensions))
                )
        merged.sort_ascending()
        return merged

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the cache file field names."""
        return {"versions": [v.to_dict() for v in self.versions]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TalosVersionTags":
        """Build a tag set from its cache file representation.

        Raises:
            ValidationError: If the document structure is invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("Cache document must be an object")

        entries = data.get("versions")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ValidationError("versions must be a list")

        tags = cls()
        for entry in entries:
            tags.append(TalosVersion.from_dict(entry))
        return tags

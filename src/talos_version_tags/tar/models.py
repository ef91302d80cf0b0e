"""Data models for image layers."""

from dataclasses import dataclass
from typing import Any, Dict

from ..exceptions import ManifestError


@dataclass
class LayerDescriptor:
    """Layer entry of an image manifest."""

    digest: str
    size: int
    media_type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayerDescriptor":
        """Build a descriptor from a manifest ``layers`` entry.

        Raises:
            ManifestError: If the entry has no digest
        """
        if not isinstance(data, dict) or not data.get("digest"):
            raise ManifestError(f"Invalid layer descriptor: {data!r}")
        return cls(
            digest=data["digest"],
            size=int(data.get("size", 0)),
            media_type=data.get("mediaType", ""),
        )

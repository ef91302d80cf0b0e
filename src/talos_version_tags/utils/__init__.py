"""Utility functions for talos-version-tags."""

from .digest import calculate_digest, validate_digest, verify_digest

__all__ = ["calculate_digest", "validate_digest", "verify_digest"]

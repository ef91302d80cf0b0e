"""Digest calculation and validation utilities."""

import hashlib
import re
from typing import Union

# algorithm:hex, e.g. "sha256:deadbeef..."
DIGEST_PATTERN = re.compile(r"^(?P<algorithm>[a-z0-9]+):(?P<hex>[a-f0-9]+)$")

# Hex length per supported algorithm
DIGEST_HEX_LENGTHS = {"sha256": 64, "sha512": 128}


def calculate_digest(data: Union[bytes, bytearray], algorithm: str = "sha256") -> str:
    """Calculate the digest of a blob.

    Args:
        data: Data to hash
        algorithm: Hash algorithm, sha256 or sha512

    Returns:
        Digest string in format "algorithm:hex"

    Raises:
        ValueError: If the algorithm is not supported or data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray)):
        raise ValueError("Data must be bytes or bytearray")

    if algorithm not in DIGEST_HEX_LENGTHS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    return f"{algorithm}:{hashlib.new(algorithm, data).hexdigest()}"


def validate_digest(digest: str) -> bool:
    """Check that a digest names a supported algorithm with a full-length hex."""
    if not isinstance(digest, str):
        return False

    match = DIGEST_PATTERN.match(digest)
    if not match:
        return False

    expected = DIGEST_HEX_LENGTHS.get(match.group("algorithm"))
    return expected is not None and len(match.group("hex")) == expected


def verify_digest(data: Union[bytes, bytearray], expected_digest: str) -> bool:
    """Verify data matches expected digest.

    Raises:
        ValueError: If digest format is invalid
    """
    if not validate_digest(expected_digest):
        raise ValueError(f"Invalid digest format: {expected_digest}")

    algorithm = expected_digest.split(":", 1)[0]
    return calculate_digest(data, algorithm) == expected_digest

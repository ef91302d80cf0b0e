"""aiohttp session helpers."""

import json
from typing import Any, Optional

import aiohttp

from ..constants import DEFAULT_TIMEOUT
from ..exceptions import RegistryError


async def create_session(
    timeout: int = DEFAULT_TIMEOUT,
    connector: Optional[aiohttp.TCPConnector] = None,
) -> aiohttp.ClientSession:
    """Create a client session with a total request timeout.

    Args:
        timeout: Total timeout per request in seconds
        connector: Optional connector for connection pooling

    Returns:
        New aiohttp session; the caller owns and closes it
    """
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout),
    )


def parse_json_body(body: bytes, source: str) -> Any:
    """Decode a response body as JSON.

    Registries serve manifests under vendor media types, so the
    Content-Type header is not checked.

    Raises:
        RegistryError: If the body is not valid JSON
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RegistryError(f"Invalid JSON response from {source}: {e}") from e


async def parse_json_response(resp: aiohttp.ClientResponse) -> Any:
    """Read a response body and decode it as JSON."""
    return parse_json_body(await resp.read(), str(resp.url))

"""Registry authentication challenge handling."""

import asyncio
import base64
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

import aiohttp

from ..exceptions import RegistryAuthError
from .session import parse_json_response

logger = logging.getLogger(__name__)

# key="value" pairs of a WWW-Authenticate header
CHALLENGE_PARAM_PATTERN = re.compile(r'(\w+)="([^"]*)"')


@dataclass
class AuthChallenge:
    """Parsed WWW-Authenticate header."""

    scheme: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def realm(self) -> Optional[str]:
        return self.params.get("realm")


def parse_www_authenticate(header: str) -> Optional[AuthChallenge]:
    """Parse a WWW-Authenticate header.

    Args:
        header: Header value, e.g.
            'Bearer realm="https://ghcr.io/token",service="ghcr.io",scope="repository:siderolabs/extensions:pull"'

    Returns:
        Parsed challenge, or None if the header is empty or has no scheme
    """
    if not header or not header.strip():
        return None

    scheme, _, rest = header.strip().partition(" ")
    params = {key.lower(): value for key, value in CHALLENGE_PARAM_PATTERN.findall(rest)}
    logger.debug("parsed challenge scheme=%s params=%s", scheme, params)
    return AuthChallenge(scheme=scheme.lower(), params=params)


def encode_basic_auth(username: str, password: str) -> str:
    """Build a Basic Authorization header value."""
    credentials = base64.b64encode(f"{username}:{password}".encode("utf-8"))
    return f"Basic {credentials.decode('ascii')}"


async def fetch_bearer_token(
    session: aiohttp.ClientSession,
    challenge: AuthChallenge,
    scope: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> str:
    """Fetch a bearer token from the challenge realm.

    Args:
        session: Open client session
        challenge: Bearer challenge returned by the registry
        scope: Scope to request when the challenge names none
        username: Optional username for a non-anonymous token
        password: Optional password for a non-anonymous token

    Returns:
        Authorization header value ("Bearer <token>")

    Raises:
        RegistryAuthError: If the realm is missing or the token request fails
    """
    if not challenge.realm:
        raise RegistryAuthError("Bearer challenge has no realm")

    query = {"scope": challenge.params.get("scope") or scope}
    if challenge.params.get("service"):
        query["service"] = challenge.params["service"]

    headers = {}
    if username is not None and password is not None:
        headers["Authorization"] = encode_basic_auth(username, password)

    logger.debug("requesting token from %s scope=%s", challenge.realm, query["scope"])
    try:
        async with session.get(challenge.realm, params=query, headers=headers) as resp:
            if resp.status != 200:
                text = await resp.text()
                raise RegistryAuthError(
                    f"Token request to {challenge.realm} failed with status "
                    f"{resp.status}: {text[:200]}"
                )
            data = await parse_json_response(resp)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise RegistryAuthError(f"Failed to fetch token from {challenge.realm}: {e}") from e

    token = None
    if isinstance(data, dict):
        token = data.get("token") or data.get("access_token")
    if not token:
        raise RegistryAuthError(f"Token endpoint {challenge.realm} returned no token")

    return f"Bearer {token}"

"""Docker Registry API v2 async client implementation."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Set
from urllib.parse import urljoin

import aiohttp

from ..constants import MANIFEST_ACCEPT
from ..exceptions import (
    BlobError,
    ManifestError,
    RegistryAuthError,
    RegistryConnectionError,
    RegistryError,
)
from ..utils.digest import validate_digest, verify_digest
from .auth import encode_basic_auth, fetch_bearer_token, parse_www_authenticate
from .session import create_session, parse_json_body
from .types import RegistryConfig

logger = logging.getLogger(__name__)

# Link: </v2/<name>/tags/list?last=v1.2.3&n=100>; rel="next"
NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="?next"?')


@dataclass
class RegistryResponse:
    """Fully read registry response."""

    status: int
    headers: Mapping[str, str]
    body: bytes
    url: str


def parse_next_link(header: Optional[str]) -> Optional[str]:
    """Extract the next page URL from a Link header."""
    if not header:
        return None
    match = NEXT_LINK_PATTERN.search(header)
    return match.group(1) if match else None


class RegistryClient:
    """Docker Registry API v2 async client with token authentication."""

    def __init__(
        self,
        config: RegistryConfig,
        connector: Optional[aiohttp.TCPConnector] = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            config: Registry connection settings
            connector: aiohttp connector for connection pooling
        """
        self.config = config
        self.registry_url = config.base_url
        self.connector = connector
        self.session: Optional[aiohttp.ClientSession] = None
        # Authorization header values per scope
        self._authorizations: Dict[str, str] = {}

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = await create_session(self.config.timeout, self.connector)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            raise RegistryError("RegistryClient must be used as an async context manager")
        return self.session

    async def _send(
        self, url: str, headers: Dict[str, str]
    ) -> RegistryResponse:
        session = self._require_session()
        try:
            async with session.get(url, headers=headers) as resp:
                body = await resp.read()
                return RegistryResponse(resp.status, resp.headers, body, str(resp.url))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RegistryConnectionError(
                f"Failed to reach registry at {self.registry_url}: {e!r}"
            ) from e

    async def _authorize(self, challenge_header: str, scope: str) -> str:
        challenge = parse_www_authenticate(challenge_header)
        if challenge is None:
            raise RegistryAuthError(
                f"Registry at {self.registry_url} returned 401 without a challenge"
            )

        if challenge.scheme == "bearer":
            return await fetch_bearer_token(
                self._require_session(),
                challenge,
                scope,
                self.config.username,
                self.config.password,
            )

        if challenge.scheme == "basic":
            if self.config.username is None or self.config.password is None:
                raise RegistryAuthError(
                    f"Registry at {self.registry_url} requires credentials"
                )
            return encode_basic_auth(self.config.username, self.config.password)

        raise RegistryAuthError(f"Unsupported auth scheme: {challenge.scheme}")

    async def request(
        self,
        path: str,
        scope: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> RegistryResponse:
        """Send a GET request, answering one authentication challenge.

        Args:
            path: Path below the registry URL or an absolute URL
            scope: Token scope (e.g., "repository:siderolabs/extensions:pull")
            headers: Extra request headers

        Returns:
            Response with its body read

        Raises:
            RegistryConnectionError: If the registry cannot be reached
            RegistryAuthError: If authentication fails
        """
        url = urljoin(self.registry_url + "/", path)
        request_headers = dict(headers or {})
        if scope in self._authorizations:
            request_headers["Authorization"] = self._authorizations[scope]

        resp = await self._send(url, request_headers)
        if resp.status != 401:
            return resp

        logger.debug("registry challenged request to %s", url)
        self._authorizations[scope] = await self._authorize(
            resp.headers.get("WWW-Authenticate", ""), scope
        )
        request_headers["Authorization"] = self._authorizations[scope]

        resp = await self._send(url, request_headers)
        if resp.status == 401:
            raise RegistryAuthError(f"Registry rejected credentials for {url}")
        return resp

    async def check_registry_v2(self) -> bool:
        """Check if the registry supports v2 API.

        Returns:
            True if v2 API is supported
        """
        try:
            resp = await self._send(f"{self.registry_url}/v2/", {})
        except RegistryConnectionError:
            return False
        # 401 still means the endpoint exists behind authentication
        return resp.status in (200, 401)

    async def list_tags(self, repository: str) -> List[str]:
        """List tags for a repository, following pagination.

        Args:
            repository: Repository path (e.g., "siderolabs/extensions")

        Returns:
            List of tag names in registry order

        Raises:
            RegistryError: If listing fails
        """
        scope = f"repository:{repository}:pull"
        next_url: Optional[str] = f"/v2/{repository}/tags/list"
        tags: List[str] = []
        visited: Set[str] = set()

        while next_url:
            if next_url in visited:
                raise RegistryError(
                    f"Pagination loop listing tags for {repository}: {next_url}"
                )
            visited.add(next_url)
            resp = await self.request(next_url, scope)
            if resp.status == 404:
                raise RegistryError(f"Repository not found: {repository}")
            if resp.status != 200:
                raise RegistryError(
                    f"Failed to list tags for {repository}: HTTP {resp.status}"
                )

            data = parse_json_body(resp.body, resp.url)
            if not isinstance(data, dict):
                raise RegistryError(f"Unexpected tags response for {repository}")

            page = data.get("tags") or []
            if not isinstance(page, list):
                raise RegistryError(f"Unexpected tags response for {repository}")

            tags.extend(str(tag) for tag in page)
            next_url = parse_next_link(resp.headers.get("Link"))
            logger.debug("fetched %d tags for %s", len(page), repository)

        return tags

    async def get_manifest(
        self,
        repository: str,
        reference: str,
        accept: str = MANIFEST_ACCEPT,
    ) -> Dict:
        """Retrieve a manifest from the registry.

        Args:
            repository: Repository name
            reference: Tag or digest reference
            accept: Accepted media types

        Returns:
            Manifest dictionary; ``mediaType`` is filled in from the
            Content-Type header when the body omits it

        Raises:
            ManifestError: If retrieval fails
        """
        scope = f"repository:{repository}:pull"
        try:
            resp = await self.request(
                f"/v2/{repository}/manifests/{reference}",
                scope,
                headers={"Accept": accept},
            )
        except RegistryConnectionError as e:
            raise ManifestError(f"Failed to get manifest: {e}") from e

        if resp.status != 200:
            raise ManifestError(
                f"Failed to get manifest {repository}:{reference}: HTTP {resp.status}"
            )

        try:
            manifest = parse_json_body(resp.body, resp.url)
        except RegistryError as e:
            raise ManifestError(f"Failed to get manifest: {e}") from e
        if not isinstance(manifest, dict):
            raise ManifestError(f"Manifest for {repository}:{reference} is not an object")

        if "mediaType" not in manifest and resp.headers.get("Content-Type"):
            manifest["mediaType"] = resp.headers["Content-Type"].split(";")[0].strip()

        return manifest

    async def get_blob(self, repository: str, digest: str) -> bytes:
        """Download a blob and verify its digest.

        Args:
            repository: Repository name
            digest: Blob digest

        Returns:
            Blob content

        Raises:
            BlobError: If download or verification fails
        """
        if not validate_digest(digest):
            raise BlobError(f"Invalid digest format: {digest}")

        scope = f"repository:{repository}:pull"
        try:
            resp = await self.request(f"/v2/{repository}/blobs/{digest}", scope)
        except RegistryConnectionError as e:
            raise BlobError(f"Failed to download blob: {e}") from e

        if resp.status != 200:
            raise BlobError(f"Failed to download blob {digest}: HTTP {resp.status}")

        if not verify_digest(resp.body, digest):
            raise BlobError(f"Digest mismatch for blob {digest}")

        return resp.body


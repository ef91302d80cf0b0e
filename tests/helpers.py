"""In-process fake registry and image builders for tests."""

import gzip
import hashlib
import io
import json
import tarfile
from typing import Optional

from aiohttp import web
from aiohttp.test_utils import TestServer

from talos_version_tags.constants import OCI_INDEX, OCI_MANIFEST


def sha256_digest(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def make_layer(files: dict[str, bytes], compress: bool = True) -> bytes:
    """Build a layer tarball containing the given files."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, fileobj=io.BytesIO(content))
    data = buffer.getvalue()
    return gzip.compress(data) if compress else data


class FakeRegistry:
    """Minimal Distribution API server backed by dictionaries."""

    def __init__(
        self,
        page_size: Optional[int] = None,
        require_token: bool = False,
    ) -> None:
        self.page_size = page_size
        self.require_token = require_token
        self.token = "test-token"
        self.tags: dict[str, list[str]] = {}
        self.manifests: dict[tuple[str, str], tuple[str, bytes]] = {}
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.token_requests: list[dict[str, str]] = []
        self.requests: list[str] = []
        self.fail_status: Optional[int] = None
        self.next_link: Optional[str] = None
        self.server: Optional[TestServer] = None

    @property
    def url(self) -> str:
        return str(self.server.make_url("/")).rstrip("/")

    @property
    def host(self) -> str:
        return f"{self.server.host}:{self.server.port}"

    def add_blob(self, repository: str, data: bytes) -> str:
        digest = sha256_digest(data)
        self.blobs[(repository, digest)] = data
        return digest

    def add_manifest(
        self, repository: str, reference: str, manifest: dict, media_type: str
    ) -> str:
        body = json.dumps(manifest).encode("utf-8")
        digest = sha256_digest(body)
        self.manifests[(repository, reference)] = (media_type, body)
        self.manifests[(repository, digest)] = (media_type, body)
        return digest

    def add_image(self, repository: str, tag: str, layers: list[bytes]) -> str:
        """Publish a single-platform image under a tag."""
        self.tags.setdefault(repository, []).append(tag)
        return self.add_manifest(
            repository, tag, self.image_manifest(repository, layers), OCI_MANIFEST
        )

    def image_manifest(self, repository: str, layers: list[bytes]) -> dict:
        config = self.add_blob(repository, b'{"architecture":"amd64","os":"linux"}')
        return {
            "schemaVersion": 2,
            "mediaType": OCI_MANIFEST,
            "config": {"mediaType": "application/vnd.oci.image.config.v1+json", "digest": config, "size": 0},
            "layers": [
                {
                    "mediaType": "application/vnd.oci.image.layer.v1.tar+gzip",
                    "digest": self.add_blob(repository, layer),
                    "size": len(layer),
                }
                for layer in layers
            ],
        }

    def add_index(self, repository: str, tag: str, platforms: dict[str, list[bytes]]) -> None:
        """Publish a multi-platform index; keys are "os/arch"."""
        entries = []
        for platform, layers in platforms.items():
            os_name, arch = platform.split("/")
            manifest = self.image_manifest(repository, layers)
            body = json.dumps(manifest).encode("utf-8")
            digest = sha256_digest(body)
            self.manifests[(repository, digest)] = (OCI_MANIFEST, body)
            entries.append(
                {
                    "mediaType": OCI_MANIFEST,
                    "digest": digest,
                    "size": 0,
                    "platform": {"os": os_name, "architecture": arch},
                }
            )
        index = {"schemaVersion": 2, "mediaType": OCI_INDEX, "manifests": entries}
        self.tags.setdefault(repository, []).append(tag)
        self.add_manifest(repository, tag, index, OCI_INDEX)

    def _challenge(self, request: web.Request, name: str) -> Optional[web.Response]:
        if not self.require_token:
            return None
        if request.headers.get("Authorization") == f"Bearer {self.token}":
            return None
        realm = f"{request.url.origin()}/token"
        return web.Response(
            status=401,
            headers={
                "WWW-Authenticate": (
                    f'Bearer realm="{realm}",service="fake-registry",'
                    f'scope="repository:{name}:pull"'
                )
            },
        )

    async def _token(self, request: web.Request) -> web.Response:
        self.token_requests.append(dict(request.query))
        return web.json_response({"token": self.token})

    async def _base(self, request: web.Request) -> web.Response:
        return web.json_response({})

    async def _tags(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        self.requests.append(request.path_qs)
        challenge = self._challenge(request, name)
        if challenge is not None:
            return challenge
        if self.fail_status is not None:
            return web.Response(status=self.fail_status)
        if name not in self.tags:
            return web.json_response({"errors": [{"code": "NAME_UNKNOWN"}]}, status=404)

        tags = self.tags[name]
        if self.next_link is not None:
            return web.json_response(
                {"name": name, "tags": tags},
                headers={"Link": f"<{self.next_link}>; rel=\"next\""},
            )
        if self.page_size is None:
            return web.json_response({"name": name, "tags": tags})

        last = request.query.get("last")
        start = tags.index(last) + 1 if last else 0
        page = tags[start : start + self.page_size]
        headers = {}
        if start + self.page_size < len(tags):
            headers["Link"] = (
                f'</v2/{name}/tags/list?n={self.page_size}&last={page[-1]}>; rel="next"'
            )
        return web.json_response({"name": name, "tags": page}, headers=headers)

    async def _manifest(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        challenge = self._challenge(request, name)
        if challenge is not None:
            return challenge
        entry = self.manifests.get((name, request.match_info["reference"]))
        if entry is None:
            return web.Response(status=404)
        media_type, body = entry
        return web.Response(body=body, headers={"Content-Type": media_type})

    async def _blob(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        challenge = self._challenge(request, name)
        if challenge is not None:
            return challenge
        data = self.blobs.get((name, request.match_info["digest"]))
        if data is None:
            return web.Response(status=404)
        return web.Response(body=data, content_type="application/octet-stream")

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/token", self._token)
        app.router.add_get("/v2/", self._base)
        app.router.add_get(r"/v2/{name:.+}/tags/list", self._tags)
        app.router.add_get(r"/v2/{name:.+}/manifests/{reference}", self._manifest)
        app.router.add_get(r"/v2/{name:.+}/blobs/{digest}", self._blob)
        return app

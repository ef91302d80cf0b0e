"""Layer archive reader implementation."""

import asyncio
import io
import tarfile
from typing import Optional

from ..exceptions import BlobError


def normalize_member_name(name: str) -> str:
    """Strip leading "./" and "/" from an archive member name."""
    while name.startswith("./"):
        name = name[2:]
    return name.lstrip("/")


class LayerReader:
    """Async reader for one downloaded layer blob (tar, optionally gzipped)."""

    def __init__(self, blob: bytes, digest: str = "") -> None:
        """Initialize layer reader.

        Args:
            blob: Layer content as downloaded from the registry
            digest: Layer digest, used in error messages
        """
        self.blob = blob
        self.digest = digest
        self._tar_file: Optional[tarfile.TarFile] = None

    async def __aenter__(self) -> "LayerReader":
        """Enter async context manager."""
        loop = asyncio.get_running_loop()
        try:
            self._tar_file = await loop.run_in_executor(None, self._open)
        except (tarfile.TarError, OSError, EOFError) as e:
            raise BlobError(f"Cannot read layer {self.digest}: {e}") from e
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the archive."""
        if self._tar_file:
            self._tar_file.close()
            self._tar_file = None

    def _open(self) -> tarfile.TarFile:
        # "r:*" detects gzip, bzip2 and xz compression
        return tarfile.open(fileobj=io.BytesIO(self.blob), mode="r:*")

    async def read_file(self, filename: str) -> Optional[bytes]:
        """Read a regular file from the layer.

        Args:
            filename: Path inside the layer, without leading "/"

        Returns:
            File content, or None if the layer has no such file

        Raises:
            BlobError: If the archive is corrupt
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._extract_file_content, filename)
        except (tarfile.TarError, OSError, EOFError) as e:
            raise BlobError(f"Cannot read {filename} from layer {self.digest}: {e}") from e

    def _extract_file_content(self, filename: str) -> Optional[bytes]:
        """Extract file content from the archive (sync helper)."""
        if not self._tar_file:
            raise BlobError("Layer archive not opened")

        for member in self._tar_file.getmembers():
            if member.isfile() and normalize_member_name(member.name) == filename:
                file_obj = self._tar_file.extractfile(member)
                if file_obj is None:
                    return None
                with file_obj:
                    return file_obj.read()
        return None

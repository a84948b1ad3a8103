"""Legacy docker archive reader implementation."""

import asyncio
import io
import json
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..constants import (
    LAYER_MANIFEST_FILE,
    LAYER_TAR_FILE,
    LAYER_VERSION_FILE,
    REPOSITORIES_FILE,
)
from ..exceptions import TarReadError, ValidationError
from ..utils.digest import calculate_digest
from .members import get_member_map, read_member
from .models import ImageInfo
from .tags import parse_repositories


class TarImageReader:
    """Async reader for archives in the legacy ``docker save`` layout."""

    def __init__(self, tar_path: Union[str, Path]) -> None:
        """Initialize tar reader.

        Args:
            tar_path: Path to the tar file
        """
        self.tar_path = Path(tar_path)
        if not self.tar_path.exists():
            raise TarReadError(f"Tar file not found: {tar_path}")
        self._tar_file: Optional[tarfile.TarFile] = None

    async def __aenter__(self) -> "TarImageReader":
        """Enter async context manager."""
        loop = asyncio.get_event_loop()
        try:
            self._tar_file = await loop.run_in_executor(
                None, tarfile.open, str(self.tar_path), "r"
            )
        except tarfile.TarError as e:
            raise TarReadError(f"Cannot open tar file {self.tar_path}: {e}") from e
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the tar file."""
        if self._tar_file:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, self._tar_file.close)
            self._tar_file = None

    async def get_repositories(self) -> Dict[str, Dict[str, str]]:
        """Get the repository index.

        Raises:
            TarReadError: If the repositories file is missing or malformed
        """
        content = await self._read(REPOSITORIES_FILE)
        try:
            return parse_repositories(content)
        except ValidationError as e:
            raise TarReadError(f"Failed to read {REPOSITORIES_FILE}: {e}") from e

    async def get_layer_ids(self) -> List[str]:
        """List layer ids referenced by the repository index, in order."""
        repos = await self.get_repositories()
        layer_ids: List[str] = []
        for tags in repos.values():
            for layer_id in tags.values():
                if layer_id not in layer_ids:
                    layer_ids.append(layer_id)
        return layer_ids

    async def get_layer_manifest(self, layer_id: str) -> Dict:
        """Get the ``<layer id>/json`` manifest.

        Raises:
            TarReadError: If the manifest is missing or not valid JSON
        """
        content = await self._read(f"{layer_id}/{LAYER_MANIFEST_FILE}")
        try:
            return json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TarReadError(f"Failed to parse manifest of layer {layer_id}: {e}") from e

    async def get_layer_version(self, layer_id: str) -> str:
        """Get the ``<layer id>/VERSION`` marker."""
        content = await self._read(f"{layer_id}/{LAYER_VERSION_FILE}")
        return content.decode("utf-8")

    async def get_layer_tar(self, layer_id: str) -> bytes:
        """Get the raw ``<layer id>/layer.tar`` bytes."""
        return await self._read(f"{layer_id}/{LAYER_TAR_FILE}")

    async def get_layer_members(self, layer_id: str) -> List[str]:
        """List the normalized member names of a layer's rootfs tarball."""
        layer_data = await self.get_layer_tar(layer_id)

        def _list_members() -> List[str]:
            with tarfile.open(fileobj=io.BytesIO(layer_data), mode="r") as layer:
                return sorted(get_member_map(layer))

        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, _list_members)
        except tarfile.TarError as e:
            raise TarReadError(f"Failed to read layer {layer_id}: {e}") from e

    async def extract_image_info(self) -> ImageInfo:
        """Extract image information for the first repository entry.

        Raises:
            TarReadError: If image info cannot be extracted
        """
        repos = await self.get_repositories()
        if not repos:
            raise TarReadError("Empty repositories file")

        repository, tags = next(iter(repos.items()))
        if not tags:
            raise TarReadError(f"No tags for repository {repository}")
        tag, layer_id = next(iter(tags.items()))

        manifest = await self.get_layer_manifest(layer_id)
        layer_data = await self.get_layer_tar(layer_id)
        runtime_config = manifest.get("config") or {}

        created_str = manifest.get("created", "")
        try:
            # Python's isoformat parser stops at microseconds
            created = datetime.fromisoformat(
                _truncate_fraction(created_str.replace("Z", "+00:00"))
            )
        except (ValueError, AttributeError):
            created = datetime.now()

        return ImageInfo(
            repository=repository,
            tag=tag,
            layer_id=layer_id,
            layer_digest=calculate_digest(layer_data),
            layer_size=len(layer_data),
            architecture=manifest.get("architecture", "amd64"),
            os=manifest.get("os", "linux"),
            created=created,
            env=runtime_config.get("Env") or [],
            cmd=runtime_config.get("Cmd"),
            entrypoint=runtime_config.get("Entrypoint"),
        )

    async def _read(self, name: str) -> bytes:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._extract_file_content, name)

    def _extract_file_content(self, filename: str) -> bytes:
        """Extract file content from tar (sync helper).

        Raises:
            TarReadError: If file cannot be extracted
        """
        if not self._tar_file:
            raise TarReadError("Tar file not opened")

        try:
            content = read_member(self._tar_file, filename)
        except (tarfile.TarError, OSError) as e:
            raise TarReadError(f"Failed to extract {filename}: {e}") from e

        if content is None:
            raise TarReadError(f"File {filename} not found in tar")
        return content


def _truncate_fraction(timestamp: str) -> str:
    """Trim fractional seconds to six digits (``.167415955`` -> ``.167415``)."""
    if "." not in timestamp:
        return timestamp
    head, rest = timestamp.split(".", 1)
    digits = ""
    while rest and rest[0].isdigit():
        digits, rest = digits + rest[0], rest[1:]
    return f"{head}.{digits[:6]}{rest}"

"""Docker test archive construction.

Builds an archive with the same layout as ``docker save`` output for a
single-layer image in the legacy format:

    repositories
    <layer id>/json
    <layer id>/layer.tar
    <layer id>/VERSION

The image is laid out under ``<directory>/<name>/``, packed into
``<directory>/<name>.tar`` and the loose tree is then removed. Any failure
stops the sequence and raises :class:`ArchiveBuildError`; partial state is
left on disk for the caller to inspect or clean up.
"""

import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence, Union

from ..constants import (
    DEFAULT_ENVIRONMENT,
    LAYER_ID,
    LAYER_MANIFEST_FILE,
    LAYER_TAR_FILE,
    LAYER_VERSION,
    LAYER_VERSION_FILE,
    REPOSITORIES_FILE,
    ROOTFS_DIR,
)
from ..exceptions import ArchiveBuildError
from ..tar.packer import Packer, pack_directory
from ..utils.fs import make_directory, remove_directory, write_file
from .manifest import (
    build_repositories,
    parse_layer_manifest,
    render_layer_manifest,
    stringify,
)
from .rootfs import LinuxRootfs
from .types import ArchiveConfig, ImageDescriptor, JsonFragment, to_json_fragment

logger = logging.getLogger(__name__)

# Rootfs collaborator signature: populate an existing directory
RootfsBuilder = Callable[[Path], object]


def _fail(message: str) -> ArchiveBuildError:
    logger.error(message)
    return ArchiveBuildError(message)


async def _await_pack(description: str, pack: Awaitable[None]) -> None:
    """Run a pack operation to completion, then inspect its outcome.

    A pack that was cancelled is reported as ``discarded``. Cancelling the
    caller cancels the pack as well and waits for it to settle before the
    cancellation propagates. Packing that runs in an executor thread cannot
    be interrupted, so the caller waits until that thread has finished.
    """
    task = asyncio.ensure_future(pack)
    try:
        await asyncio.wait({task})
    except asyncio.CancelledError:
        task.cancel()
        # Does not raise the task's own outcome
        await asyncio.wait({task})
        raise

    if task.cancelled():
        raise _fail(f"Failed to {description}: discarded")

    error = task.exception()
    if error is not None:
        raise _fail(f"Failed to {description}: {error}") from error


class DockerArchiveBuilder:
    """Builds docker test image archives.

    Args:
        config: Archive configuration
        rootfs_builder: Populates the layer rootfs directory; defaults to
            :meth:`LinuxRootfs.create` with ``config.host_files``
        packer: Packs a directory into a tar file; defaults to
            :func:`pack_directory` with ``config.tar_command`` and
            ``config.mtime``
    """

    def __init__(
        self,
        config: Optional[ArchiveConfig] = None,
        rootfs_builder: Optional[RootfsBuilder] = None,
        packer: Optional[Packer] = None,
    ) -> None:
        self.config = config or ArchiveConfig()
        self.rootfs_builder = rootfs_builder or partial(
            LinuxRootfs.create, host_files=self.config.host_files
        )
        self.packer = packer or partial(
            pack_directory,
            tar_command=self.config.tar_command,
            mtime=self.config.mtime,
        )

    async def create(self, directory: Union[str, Path], image: ImageDescriptor) -> Path:
        """Create ``<directory>/<image.name>.tar``.

        Args:
            directory: Target directory, created (with parents) if missing
            image: Image to synthesize

        Returns:
            Path to the produced archive

        Raises:
            ArchiveBuildError: If any step fails
        """
        directory = Path(directory)
        logger.debug(f"Creating docker test image '{image.name}' in {directory}")

        image_path = await self._build_layout(directory, image)
        await self._write_layer(image_path, image)
        archive_path = await self._pack_image(directory, image_path, image)

        logger.info(f"Created docker test image archive {archive_path}")
        return archive_path

    async def _build_layout(self, directory: Path, image: ImageDescriptor) -> Path:
        """Ensure the target directory, create the image root and index."""
        try:
            await make_directory(directory, recursive=True)
        except OSError as e:
            raise _fail(f"Failed to create '{directory}': {e}") from e

        image_path = directory / image.name

        try:
            await make_directory(image_path)
        except OSError as e:
            raise _fail(
                f"Failed to create docker test image directory '{image_path}': {e}"
            ) from e

        try:
            await write_file(
                image_path / REPOSITORIES_FILE,
                stringify(build_repositories(image.name, LAYER_ID)),
            )
        except OSError as e:
            raise _fail(
                f"Failed to save docker test image '{REPOSITORIES_FILE}': {e}"
            ) from e

        logger.debug(f"Wrote repository index for '{image.name}'")
        return image_path

    async def _write_layer(self, image_path: Path, image: ImageDescriptor) -> Path:
        """Create the layer directory with its manifest, tarball and version."""
        layer_path = image_path / LAYER_ID

        try:
            await make_directory(layer_path)
        except OSError as e:
            raise _fail(
                f"Failed to create docker test image layer '{LAYER_ID}': {e}"
            ) from e

        try:
            manifest = parse_layer_manifest(
                render_layer_manifest(
                    image.environment,
                    to_json_fragment(image.cmd),
                    to_json_fragment(image.entrypoint),
                )
            )
        except ValueError as e:
            raise _fail(f"Failed to parse docker test image layer manifest: {e}") from e

        try:
            await write_file(layer_path / LAYER_MANIFEST_FILE, stringify(manifest))
        except OSError as e:
            raise _fail(
                f"Failed to save docker test image layer '{LAYER_ID}': {e}"
            ) from e

        rootfs_path = layer_path / ROOTFS_DIR

        try:
            await make_directory(rootfs_path)
        except OSError as e:
            raise _fail(
                f"Failed to create layer rootfs directory '{rootfs_path}': {e}"
            ) from e

        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, self.rootfs_builder, rootfs_path)
        except Exception as e:
            raise _fail(f"Failed to create docker test image rootfs: {e}") from e

        logger.debug(f"Populated layer rootfs at {rootfs_path}")

        await _await_pack(
            "tar root filesystem",
            self.packer(rootfs_path, layer_path / LAYER_TAR_FILE),
        )

        try:
            await remove_directory(rootfs_path)
        except OSError as e:
            raise _fail(f"Failed to remove layer rootfs directory: {e}") from e

        try:
            await write_file(layer_path / LAYER_VERSION_FILE, LAYER_VERSION)
        except OSError as e:
            raise _fail(f"Failed to save layer version: {e}") from e

        logger.debug(f"Wrote layer {LAYER_ID}")
        return layer_path

    async def _pack_image(
        self, directory: Path, image_path: Path, image: ImageDescriptor
    ) -> Path:
        """Pack the image root into ``<name>.tar`` and remove the loose tree."""
        archive_path = directory / image.archive_name

        await _await_pack(
            "tar docker test image",
            self.packer(image_path, archive_path),
        )

        try:
            await remove_directory(image_path)
        except OSError as e:
            raise _fail(f"Failed to remove image directory: {e}") from e

        return archive_path


async def create_docker_archive(
    directory: Union[str, Path],
    name: str,
    entrypoint: JsonFragment = "null",
    cmd: JsonFragment = "null",
    environment: Sequence[str] = DEFAULT_ENVIRONMENT,
    config: Optional[ArchiveConfig] = None,
) -> Path:
    """Docker 테스트 이미지 아카이브를 ``<directory>/<name>.tar`` 경로에 생성합니다.

    `docker save` 의 레거시 형식(repositories, <layer id>/json, layer.tar, VERSION)과
    동일한 구조의 단일 레이어 아카이브를 만들고, 작업용 디렉토리는 삭제합니다.

    Args:
        directory: 대상 디렉토리 (없으면 상위 디렉토리까지 생성)
        name: 이미지 이름 (latest 태그와 아카이브 파일 이름에 사용)
        entrypoint: JSON 배열 문자열 (예: '["sh", "-c"]') 또는 문자열 리스트
            - "null": entrypoint 미지정 (기본값)
        cmd: entrypoint 와 같은 형식
        environment: "KEY=VALUE" 형식의 환경 변수 목록
        config: 아카이브 설정 (선택사항)

    Returns:
        Path: 생성된 아카이브 경로 (예: Path("/tmp/images/alpine.tar"))

    Raises:
        ArchiveBuildError: 어느 단계에서든 실패한 경우 (부분 결과는 정리하지 않음)

    Examples:
        # 기본 환경 변수로 생성
        archive = await create_docker_archive("/tmp/images", "alpine")

        # cmd 지정
        archive = await create_docker_archive(
            "/tmp/images", "alpine", cmd='["sh", "-c", "echo hello"]'
        )
    """
    try:
        image = ImageDescriptor(
            name=name, entrypoint=entrypoint, cmd=cmd, environment=environment
        )
    except ValueError as e:
        raise _fail(f"Invalid docker test image '{name}': {e}") from e
    return await DockerArchiveBuilder(config).create(directory, image)

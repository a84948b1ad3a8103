"""Example: generate a docker test image archive and inspect it."""

import asyncio
import logging
import sys
from pathlib import Path

from docker_archive import (
    ArchiveBuildError,
    ArchiveConfig,
    TarImageReader,
    create_docker_archive,
    validate_docker_archive,
)
from docker_archive.utils.logging import setup_logging

# Child of the package logger so setup_logging() covers it
logger = logging.getLogger("docker_archive.examples.create_fixture")


async def main(directory: str) -> int:
    """Create ``<directory>/alpine.tar`` and print what it contains."""
    try:
        archive = await create_docker_archive(
            directory,
            "alpine",
            entrypoint='["/bin/sh", "-c"]',
            cmd='["echo hello"]',
            config=ArchiveConfig(mtime=0),
        )
    except ArchiveBuildError as e:
        logger.error(f"Fixture generation failed: {e}")
        return 1

    logger.info(f"Valid archive: {validate_docker_archive(archive)}")

    async with TarImageReader(archive) as reader:
        info = await reader.extract_image_info()
        members = await reader.get_layer_members(info.layer_id)

    logger.info(f"{info.repository}:{info.tag} -> {info.layer_id}")
    logger.info(f"Layer {info.layer_digest} ({info.layer_size} bytes)")
    logger.info(f"Rootfs entries: {len(members)}")
    return 0


if __name__ == "__main__":
    setup_logging("DEBUG")
    target = sys.argv[1] if len(sys.argv) > 1 else str(Path.cwd() / "fixtures")
    sys.exit(asyncio.run(main(target)))

"""Docker archive fixtures - synthesize legacy ``docker save`` tarballs for tests."""

__version__ = "0.1.0"

from .constants import DEFAULT_ENVIRONMENT, LAYER_ID
from .core.builder import DockerArchiveBuilder, create_docker_archive
from .core.rootfs import LinuxRootfs
from .core.types import ArchiveConfig, ImageDescriptor
from .exceptions import (
    ArchiveBuildError,
    DockerArchiveError,
    PackError,
    RootfsError,
    TarReadError,
    ValidationError,
)
from .tar.packer import pack_directory
from .tar.reader import TarImageReader
from .utils.validator import validate_docker_archive

__all__ = [
    "create_docker_archive",
    "DockerArchiveBuilder",
    "ImageDescriptor",
    "ArchiveConfig",
    "LinuxRootfs",
    "TarImageReader",
    "pack_directory",
    "validate_docker_archive",
    "DEFAULT_ENVIRONMENT",
    "LAYER_ID",
    "DockerArchiveError",
    "ArchiveBuildError",
    "PackError",
    "RootfsError",
    "TarReadError",
    "ValidationError",
]

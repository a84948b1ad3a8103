"""Synthetic root filesystem trees for test image layers."""

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from ..constants import HOSTNAME
from ..exceptions import RootfsError

logger = logging.getLogger(__name__)

LINUX_DIRECTORIES = (
    "bin",
    "dev",
    "etc",
    "lib",
    "proc",
    "sys",
    "tmp",
    "usr/bin",
    "var",
)

LINUX_FILES: Dict[str, str] = {
    "etc/passwd": (
        "root:x:0:0:root:/root:/bin/sh\n"
        "nobody:x:65534:65534:nobody:/nonexistent:/usr/sbin/nologin\n"
    ),
    "etc/group": "root:x:0:\nnogroup:x:65534:\n",
    "etc/hosts": "127.0.0.1\tlocalhost\n::1\tlocalhost ip6-localhost ip6-loopback\n",
    "etc/hostname": f"{HOSTNAME}\n",
    "etc/os-release": 'NAME="Test Linux"\nID=test\nVERSION_ID="1.0"\n',
}


class Rootfs:
    """A root filesystem tree rooted at a directory on disk."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def add_directory(self, relative: str, mode: Optional[int] = None) -> Path:
        path = self.root / relative
        try:
            path.mkdir(parents=True, exist_ok=True)
            if mode is not None:
                path.chmod(mode)
        except OSError as e:
            raise RootfsError(f"Failed to create directory '{path}': {e}") from e
        return path

    def add_file(self, relative: str, content: str, mode: int = 0o644) -> Path:
        path = self.root / relative
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            path.chmod(mode)
        except OSError as e:
            raise RootfsError(f"Failed to write file '{path}': {e}") from e
        return path

    def copy_host_file(self, host_path: str) -> Path:
        """Copy a host file into the tree at the same absolute location.

        Raises:
            RootfsError: If the host file does not exist or cannot be copied
        """
        source = Path(host_path)
        if not source.is_absolute():
            raise RootfsError(f"Host path must be absolute: '{host_path}'")
        if not source.exists():
            raise RootfsError(f"Host file '{host_path}' does not exist")

        target = self.root / source.relative_to(source.anchor)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(source, target, follow_symlinks=True)
        except OSError as e:
            raise RootfsError(f"Failed to copy '{host_path}': {e}") from e
        return target

    def files(self) -> list[str]:
        """List every path in the tree, relative to the root, sorted."""
        entries = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            base = Path(dirpath).relative_to(self.root)
            for name in dirnames + filenames:
                entries.append((base / name).as_posix())
        return sorted(entries)


class LinuxRootfs(Rootfs):
    """Minimal Linux-looking rootfs: standard directories and /etc files."""

    @classmethod
    def create(
        cls, root: Union[str, Path], host_files: Iterable[str] = ()
    ) -> "LinuxRootfs":
        """Populate ``root`` with a synthetic Linux tree.

        Args:
            root: Existing directory to populate
            host_files: Absolute host paths to copy into the tree

        Returns:
            The populated rootfs

        Raises:
            RootfsError: If the root is missing or any entry cannot be created
        """
        if isinstance(host_files, str):
            raise RootfsError("host_files must be a sequence of paths, not a string")

        rootfs = cls(root)
        if not rootfs.root.is_dir():
            raise RootfsError(f"Rootfs directory '{root}' does not exist")

        for directory in LINUX_DIRECTORIES:
            rootfs.add_directory(directory, mode=0o1777 if directory == "tmp" else None)

        for relative, content in LINUX_FILES.items():
            rootfs.add_file(relative, content)

        for host_path in host_files:
            rootfs.copy_host_file(host_path)

        logger.debug(f"Created linux rootfs at {rootfs.root}")
        return rootfs

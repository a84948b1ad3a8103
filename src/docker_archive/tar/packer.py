"""Pack a directory into a tar file, in-process or with an external tar."""

import asyncio
import logging
import tarfile
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from ..exceptions import PackError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Packer collaborator signature: (source directory, output tar) -> None
Packer = Callable[[Path, Path], Awaitable[None]]


def _normalize_member(tarinfo: tarfile.TarInfo, mtime: int) -> tarfile.TarInfo:
    """Strip host-specific metadata from a member for reproducible output."""
    tarinfo.mtime = mtime
    tarinfo.uid = 0
    tarinfo.gid = 0
    tarinfo.uname = ""
    tarinfo.gname = ""
    return tarinfo


def _pack_with_tarfile(directory: Path, output: Path, mtime: Optional[int]) -> None:
    """Pack ``directory`` contents into ``output`` (sync helper).

    Members are named ``.`` and ``./<path>``, matching ``tar -C dir -cf out .``.
    """
    member_filter = partial(_normalize_member, mtime=mtime) if mtime is not None else None

    try:
        with tarfile.open(output, "w") as tar:
            tar.add(str(directory), arcname=".", recursive=True, filter=member_filter)
    except (tarfile.TarError, OSError) as e:
        raise PackError(f"Failed to pack '{directory}' into '{output}': {e}") from e


async def _pack_with_command(
    tar_command: str, directory: Path, output: Path, mtime: Optional[int]
) -> None:
    """Pack ``directory`` contents by running an external tar binary."""
    cmd = [tar_command, "-c", "-f", str(output), "-C", str(directory)]
    if mtime is not None:
        # GNU tar options for reproducible archives
        cmd += [
            f"--mtime=@{mtime}",
            "--owner=0",
            "--group=0",
            "--numeric-owner",
            "--sort=name",
        ]
    cmd.append(".")

    logger.debug(f"Running command: {' '.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise PackError(f"Failed to run '{tar_command}': {e}") from e

    try:
        _, stderr = await process.communicate()
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    if process.returncode != 0:
        message = stderr.decode(errors="replace").strip() if stderr else ""
        raise PackError(
            f"'{tar_command}' exited with status {process.returncode}"
            + (f": {message}" if message else "")
        )


async def pack_directory(
    directory: PathLike,
    output: PathLike,
    *,
    tar_command: Optional[str] = None,
    mtime: Optional[int] = None,
) -> None:
    """Pack the contents of a directory into a tar file.

    Args:
        directory: Directory whose contents are packed
        output: Tar file to create; must not be inside ``directory``
        tar_command: External tar binary to run instead of ``tarfile``
        mtime: Fixed member mtime; also normalizes ownership when set

    Cancelling an in-process pack does not stop the packing thread. The
    cancellation is raised once the thread has finished writing ``output``.

    Raises:
        PackError: If the directory is missing or packing fails
    """
    directory = Path(directory)
    output = Path(output)

    if not directory.is_dir():
        raise PackError(f"Directory '{directory}' does not exist")

    if tar_command is not None:
        await _pack_with_command(tar_command, directory, output, mtime)
    else:
        loop = asyncio.get_event_loop()
        future = loop.run_in_executor(
            None, _pack_with_tarfile, directory, output, mtime
        )
        try:
            await asyncio.shield(future)
        except asyncio.CancelledError:
            # The executor thread cannot be interrupted; let it finish first
            await asyncio.wait({future})
            raise

    logger.debug(f"Packed {directory} into {output}")

"""Async filesystem primitives used while laying out an archive."""

import asyncio
import shutil
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

PathLike = Union[str, Path]


async def make_directory(path: PathLike, recursive: bool = False) -> None:
    """Create a directory.

    Args:
        path: Directory to create
        recursive: Create missing parents and accept an existing directory

    Raises:
        OSError: If the directory cannot be created, or already exists
            when ``recursive`` is False
    """
    if recursive:
        await aiofiles.os.makedirs(path, exist_ok=True)
    else:
        await aiofiles.os.mkdir(path)


async def remove_directory(path: PathLike) -> None:
    """Remove a directory tree.

    Raises:
        OSError: If the tree cannot be removed
    """
    loop = asyncio.get_event_loop()
    await loop.run_in_executor(None, shutil.rmtree, str(path))


async def write_file(path: PathLike, content: str) -> None:
    """Write text content to a file, replacing any existing content.

    Raises:
        OSError: If the file cannot be written
    """
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(content)

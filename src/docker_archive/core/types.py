"""Core types for docker archive construction."""

import json
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from ..constants import DEFAULT_ENVIRONMENT

# A raw JSON fragment (spliced verbatim), or a structured value to serialize
JsonFragment = Union[str, Sequence[str], None]


def to_json_fragment(value: JsonFragment) -> str:
    """Return the JSON text used for an entrypoint or cmd value.

    Strings are trusted to already be JSON and are returned unchanged, so
    callers can pass deliberately malformed fragments.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    return json.dumps(list(value))


@dataclass(frozen=True)
class ImageDescriptor:
    """Identity and runtime configuration of the image to synthesize."""

    name: str
    entrypoint: JsonFragment = "null"
    cmd: JsonFragment = "null"
    environment: Sequence[str] = DEFAULT_ENVIRONMENT

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Image name must not be empty")
        if isinstance(self.environment, str):
            raise ValueError("Image environment must be a sequence of strings, not a string")
        # Freeze the caller's list so later mutation cannot leak in
        object.__setattr__(self, "environment", tuple(self.environment))

    @property
    def archive_name(self) -> str:
        return f"{self.name}.tar"


@dataclass
class ArchiveConfig:
    """Archive construction configuration.

    Attributes:
        tar_command: External tar binary to pack with; packs in-process
            with ``tarfile`` when unset
        mtime: Clamp member mtimes and normalize ownership for
            reproducible output; keeps filesystem metadata when unset
        host_files: Extra host files copied into the layer rootfs
    """

    tar_command: Optional[str] = None
    mtime: Optional[int] = None
    host_files: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.host_files, str):
            raise ValueError("host_files must be a sequence of paths, not a string")
        self.host_files = tuple(self.host_files)

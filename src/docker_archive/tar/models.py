"""Data models for archive reading."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ImageInfo:
    """Docker image information extracted from a legacy archive."""

    repository: str
    tag: str
    layer_id: str
    layer_digest: str
    layer_size: int
    architecture: str
    os: str
    created: datetime
    env: List[str] = field(default_factory=list)
    cmd: Optional[List[str]] = None
    entrypoint: Optional[List[str]] = None

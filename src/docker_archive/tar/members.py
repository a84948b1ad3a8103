"""Member lookup helpers for archives packed relative to ``.``."""

import tarfile
from typing import Dict, Optional


def normalize_member_name(name: str) -> str:
    """Strip a leading ``./`` (or bare ``.``) from a member name."""
    while name.startswith("./"):
        name = name[2:]
    return "" if name == "." else name.rstrip("/")


def get_member_map(tar: tarfile.TarFile) -> Dict[str, tarfile.TarInfo]:
    """Map normalized member names to their tar entries."""
    members = {}
    for member in tar.getmembers():
        name = normalize_member_name(member.name)
        if name:
            members[name] = member
    return members


def read_member(tar: tarfile.TarFile, name: str) -> Optional[bytes]:
    """Read a regular file member by normalized name.

    Returns:
        File content, or None if no such regular file exists
    """
    member = get_member_map(tar).get(name)
    if member is None or not member.isfile():
        return None

    file_obj = tar.extractfile(member)
    if file_obj is None:
        return None
    with file_obj:
        return file_obj.read()

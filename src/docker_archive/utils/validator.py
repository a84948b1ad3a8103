"""Structure validation for legacy docker archives."""

import json
import tarfile
from pathlib import Path
from typing import Any

from ..constants import (
    LAYER_MANIFEST_FILE,
    LAYER_TAR_FILE,
    LAYER_VERSION,
    LAYER_VERSION_FILE,
    REPOSITORIES_FILE,
)
from ..exceptions import ValidationError
from ..tar.members import get_member_map, read_member
from ..tar.tags import parse_repositories
from .digest import is_layer_id


def is_path_exists(path: Path) -> bool:
    """Check if file path exists."""
    return path.exists()


def is_valid_tarfile(path: Path) -> bool:
    """Check if file is a valid tar file."""
    return tarfile.is_tarfile(path)


def get_tar_members(tar: tarfile.TarFile) -> set[str]:
    """Extract normalized member names from tar file."""
    return set(get_member_map(tar))


def has_required_files(tar_members: set[str], required_files: list[str]) -> bool:
    """Check if tar contains all required files."""
    return all(required_file in tar_members for required_file in required_files)


def get_layer_files(layer_id: str) -> list[str]:
    """Files every legacy layer directory must contain."""
    return [
        f"{layer_id}/{LAYER_MANIFEST_FILE}",
        f"{layer_id}/{LAYER_TAR_FILE}",
        f"{layer_id}/{LAYER_VERSION_FILE}",
    ]


def extract_repositories(tar: tarfile.TarFile) -> dict[str, dict[str, str]] | None:
    """Extract and parse the repositories file, or None if unusable."""
    content = read_member(tar, REPOSITORIES_FILE)
    if content is None:
        return None
    try:
        return parse_repositories(content)
    except ValidationError:
        return None


def extract_layer_manifest(tar: tarfile.TarFile, layer_id: str) -> dict[str, Any] | None:
    """Extract and parse a layer's json manifest, or None if unusable."""
    content = read_member(tar, f"{layer_id}/{LAYER_MANIFEST_FILE}")
    if content is None:
        return None
    try:
        manifest = json.loads(content.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return manifest if isinstance(manifest, dict) else None


def is_layer_version_valid(tar: tarfile.TarFile, layer_id: str) -> bool:
    """Check the layer's VERSION marker."""
    content = read_member(tar, f"{layer_id}/{LAYER_VERSION_FILE}")
    return content is not None and content.decode("utf-8", "replace") == LAYER_VERSION


def validate_layer(tar: tarfile.TarFile, layer_id: str, tar_members: set[str]) -> bool:
    """Validate a single layer directory."""
    if not is_layer_id(layer_id):
        return False

    if not has_required_files(tar_members, get_layer_files(layer_id)):
        return False

    manifest = extract_layer_manifest(tar, layer_id)
    if manifest is None or manifest.get("id") != layer_id:
        return False

    return is_layer_version_valid(tar, layer_id)


def validate_docker_archive(tar_path: Path) -> bool:
    """tar 파일이 유효한 레거시 Docker 이미지 아카이브인지 검증합니다.

    repositories 파일이 존재하고, 참조된 모든 레이어 디렉토리에
    json, layer.tar, VERSION 파일이 있는지 확인합니다.

    Args:
        tar_path: 검증할 tar 파일 경로
            - Path 객체: Path("/tmp/fixtures/alpine.tar")
            - 상대경로도 지원: Path("./fixtures/alpine.tar")

    Returns:
        bool: 유효한 아카이브인 경우 True, 그렇지 않으면 False

    Raises:
        ValidationError: tar 파일이 없거나 읽을 수 없는 경우

    Examples:
        from pathlib import Path

        if validate_docker_archive(Path("alpine.tar")):
            print("유효한 Docker 이미지 아카이브입니다")
    """
    tar_path = Path(tar_path)
    try:
        if not is_path_exists(tar_path):
            raise ValidationError(f"Tar file does not exist: {tar_path}")

        if not is_valid_tarfile(tar_path):
            return False

        with tarfile.open(tar_path, "r") as tar:
            tar_members = get_tar_members(tar)

            if not has_required_files(tar_members, [REPOSITORIES_FILE]):
                return False

            repositories = extract_repositories(tar)
            if not repositories:
                return False

            layer_ids = {
                layer_id for tags in repositories.values() for layer_id in tags.values()
            }
            if not layer_ids:
                return False

            return all(
                validate_layer(tar, layer_id, tar_members) for layer_id in layer_ids
            )

    except (tarfile.TarError, OSError) as e:
        raise ValidationError(f"Error reading tar file: {e}") from e

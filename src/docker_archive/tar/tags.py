"""Tag extraction from legacy docker archives."""

import json
import tarfile
from pathlib import Path
from typing import Union

from ..constants import DEFAULT_TAG, REPOSITORIES_FILE
from ..exceptions import TarReadError, ValidationError
from .members import read_member


def parse_repositories(content: bytes) -> dict[str, dict[str, str]]:
    """Parse and check the structure of a ``repositories`` file.

    Raises:
        ValidationError: If the content is not ``{"repo": {"tag": "id"}}``
    """
    try:
        repos_data = json.loads(content.decode("utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in repositories file: {e}") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"Cannot decode repositories file: {e}") from e

    if not isinstance(repos_data, dict):
        raise ValidationError("repositories file must be a JSON object")

    for repo_name, tag_dict in repos_data.items():
        if not isinstance(tag_dict, dict):
            raise ValidationError(f"Invalid tags for repository '{repo_name}'")
        for tag_name, layer_id in tag_dict.items():
            if not isinstance(layer_id, str):
                raise ValidationError(
                    f"Invalid layer id for '{repo_name}:{tag_name}'"
                )

    return repos_data


def extract_repo_tags(tar_path: Union[str, Path]) -> list[str]:
    """Docker 아카이브의 repositories 파일에서 저장소 태그를 추출합니다.

    Args:
        tar_path: Docker 아카이브 경로
            - 문자열 경로: "/tmp/images/alpine.tar"
            - Path 객체: Path("./fixtures/alpine.tar")

    Returns:
        list[str]: 저장소 태그 목록 (예: ["alpine:latest"])

    Raises:
        TarReadError: tar 파일을 읽을 수 없는 경우
        ValidationError: repositories 파일이 없거나 잘못된 경우

    Examples:
        tags = extract_repo_tags("alpine.tar")
        # 결과: ["alpine:latest"]
    """
    try:
        with tarfile.open(tar_path, "r") as tar:
            content = read_member(tar, REPOSITORIES_FILE)
    except (tarfile.TarError, OSError) as e:
        raise TarReadError(f"Cannot read tar file: {e}") from e

    if content is None:
        raise ValidationError("repositories file not found in tar file")

    repos_data = parse_repositories(content)

    return [
        f"{repo_name}:{tag_name}"
        for repo_name, tag_dict in repos_data.items()
        for tag_name in tag_dict
    ]


def parse_repository_tag(repo_tag: str) -> tuple[str, str]:
    """저장소:태그 문자열을 저장소와 태그 구성요소로 파싱합니다.

    Args:
        repo_tag: 저장소 태그 문자열
            - 예: "alpine:latest", "localhost:5000/myapp:latest"

    Returns:
        tuple[str, str]: (저장소, 태그) 튜플

    Examples:
        repo, tag = parse_repository_tag("localhost:5000/myapp:latest")
        # 결과: ("localhost:5000/myapp", "latest")

        repo, tag = parse_repository_tag("myapp")
        # 결과: ("myapp", "latest")
    """
    if ":" in repo_tag:
        # Split only on the last ':' to handle registry URLs like localhost:5000/repo:tag
        repository, tag = repo_tag.rsplit(":", 1)
        # A ':' inside the registry host is not a tag separator
        if tag and "/" not in tag:
            return repository, tag
        if not tag:
            return repository, DEFAULT_TAG

    return repo_tag, DEFAULT_TAG


def get_primary_tag(tar_path: Union[str, Path]) -> tuple[str, str] | None:
    """아카이브에서 첫 번째 저장소와 태그를 가져옵니다.

    Returns:
        tuple[str, str] | None: (저장소, 태그) 튜플 또는 태그가 없는 경우 None
    """
    try:
        repo_tags = extract_repo_tags(tar_path)
    except (TarReadError, ValidationError):
        return None

    if not repo_tags:
        return None
    return parse_repository_tag(repo_tags[0])

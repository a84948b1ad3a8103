"""Tests for archive structure validation."""

import io
import json
import tarfile

import pytest

from docker_archive import LAYER_ID, create_docker_archive
from docker_archive.exceptions import ValidationError
from docker_archive.utils.validator import (
    get_layer_files,
    get_tar_members,
    has_required_files,
    is_path_exists,
    is_valid_tarfile,
    validate_docker_archive,
    validate_layer,
)


def layer_files(layer_id=LAYER_ID, manifest_id=None, version=b"1.0"):
    """Member contents for a minimal valid archive."""
    return {
        "./repositories": json.dumps({"test": {"latest": layer_id}}).encode(),
        f"./{layer_id}/json": json.dumps({"id": manifest_id or layer_id}).encode(),
        f"./{layer_id}/layer.tar": b"layer content",
        f"./{layer_id}/VERSION": version,
    }


def make_tar(tar_path, files):
    with tarfile.open(tar_path, "w") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, fileobj=io.BytesIO(content))
    return tar_path


@pytest.mark.asyncio
async def test_validate_generated_archive(tmp_path):
    """A generated archive is valid."""
    archive = await create_docker_archive(tmp_path, "alpine")

    assert validate_docker_archive(archive) is True


def test_validate_synthetic_archive(tmp_path):
    """A hand-built archive with every required file is valid."""
    tar_path = make_tar(tmp_path / "valid.tar", layer_files())

    assert validate_docker_archive(tar_path) is True


def test_validate_missing_repositories(tmp_path):
    """Validation fails when repositories is missing."""
    files = layer_files()
    del files["./repositories"]
    tar_path = make_tar(tmp_path / "no_repos.tar", files)

    assert validate_docker_archive(tar_path) is False


def test_validate_invalid_repositories_json(tmp_path):
    """Validation fails with invalid JSON in repositories."""
    files = layer_files()
    files["./repositories"] = b"invalid json"
    tar_path = make_tar(tmp_path / "bad_repos.tar", files)

    assert validate_docker_archive(tar_path) is False


@pytest.mark.parametrize("missing", ["json", "layer.tar", "VERSION"])
def test_validate_missing_layer_file(tmp_path, missing):
    """Validation fails when a layer file is missing."""
    files = layer_files()
    del files[f"./{LAYER_ID}/{missing}"]
    tar_path = make_tar(tmp_path / "missing.tar", files)

    assert validate_docker_archive(tar_path) is False


def test_validate_wrong_version(tmp_path):
    """Validation fails when VERSION is not 1.0."""
    tar_path = make_tar(tmp_path / "version.tar", layer_files(version=b"2.0"))

    assert validate_docker_archive(tar_path) is False


def test_validate_manifest_id_mismatch(tmp_path):
    """Validation fails when the manifest id differs from its directory."""
    tar_path = make_tar(
        tmp_path / "mismatch.tar", layer_files(manifest_id="f" * 64)
    )

    assert validate_docker_archive(tar_path) is False


def test_validate_bad_layer_id(tmp_path):
    """Layer ids must be 64 hex characters."""
    tar_path = make_tar(tmp_path / "short.tar", layer_files(layer_id="abc123"))

    assert validate_docker_archive(tar_path) is False


def test_validate_not_a_tar(tmp_path):
    """A file that is not a tar archive is not valid."""
    path = tmp_path / "garbage.tar"
    path.write_bytes(b"garbage" * 200)

    assert validate_docker_archive(path) is False


def test_validate_nonexistent_file(tmp_path):
    """Validation of a missing file raises."""
    with pytest.raises(ValidationError, match="does not exist"):
        validate_docker_archive(tmp_path / "missing.tar")


def test_helpers(tmp_path):
    """Individual checks used by validate_docker_archive."""
    tar_path = make_tar(tmp_path / "valid.tar", layer_files())

    assert is_path_exists(tar_path)
    assert is_valid_tarfile(tar_path)
    assert get_layer_files(LAYER_ID) == [
        f"{LAYER_ID}/json",
        f"{LAYER_ID}/layer.tar",
        f"{LAYER_ID}/VERSION",
    ]

    with tarfile.open(tar_path) as tar:
        members = get_tar_members(tar)
        assert "repositories" in members
        assert has_required_files(members, get_layer_files(LAYER_ID))
        assert validate_layer(tar, LAYER_ID, members)
        assert not validate_layer(tar, "e" * 64, members)

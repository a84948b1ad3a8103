"""Test configuration and fixtures."""

import tarfile
from pathlib import Path

import pytest

from docker_archive import ArchiveConfig


@pytest.fixture
def images_dir(tmp_path):
    """Target directory for generated archives (not created yet)."""
    return tmp_path / "images"


@pytest.fixture
def reproducible_config():
    """Configuration producing byte-reproducible archives."""
    return ArchiveConfig(mtime=0)


@pytest.fixture
def extract(tmp_path):
    """Extract a tar file into a fresh directory and return that directory."""
    counter = {"n": 0}

    def _extract(tar_path: Path) -> Path:
        counter["n"] += 1
        dest = tmp_path / f"extracted-{counter['n']}"
        dest.mkdir()
        with tarfile.open(tar_path, "r") as tar:
            tar.extractall(dest, filter="data")
        return dest

    return _extract


def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line(
        "markers", "external_tar: mark test as requiring a tar binary on PATH"
    )

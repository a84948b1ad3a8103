"""Tests for filesystem, digest and logging utilities."""

import logging

import pytest

from docker_archive import LAYER_ID
from docker_archive.utils import calculate_digest, is_layer_id, validate_digest
from docker_archive.utils.fs import make_directory, remove_directory, write_file
from docker_archive.utils.logging import setup_logging


@pytest.mark.asyncio
async def test_make_directory(tmp_path):
    """A plain directory is created once; a second attempt fails."""
    path = tmp_path / "image"

    await make_directory(path)

    assert path.is_dir()
    with pytest.raises(FileExistsError):
        await make_directory(path)


@pytest.mark.asyncio
async def test_make_directory_recursive(tmp_path):
    """Recursive creation makes parents and accepts an existing directory."""
    path = tmp_path / "a" / "b"

    await make_directory(path, recursive=True)
    await make_directory(path, recursive=True)

    assert path.is_dir()


@pytest.mark.asyncio
async def test_make_directory_missing_parent(tmp_path):
    """Non-recursive creation needs the parent to exist."""
    with pytest.raises(FileNotFoundError):
        await make_directory(tmp_path / "a" / "b")


@pytest.mark.asyncio
async def test_write_and_remove(tmp_path):
    """Files are written as text and trees removed recursively."""
    root = tmp_path / "tree"
    (root / "sub").mkdir(parents=True)

    await write_file(root / "sub" / "VERSION", "1.0")

    assert (root / "sub" / "VERSION").read_bytes() == b"1.0"

    await remove_directory(root)

    assert not root.exists()


@pytest.mark.asyncio
async def test_remove_missing_directory(tmp_path):
    """Removing a missing tree is an error."""
    with pytest.raises(OSError):
        await remove_directory(tmp_path / "missing")


def test_calculate_digest():
    """sha256 digests are prefixed with the algorithm."""
    digest = calculate_digest(b"hello")

    assert digest == (
        "sha256:2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
    )
    assert validate_digest(digest)


def test_calculate_digest_rejects_text():
    with pytest.raises(ValueError):
        calculate_digest("hello")


def test_is_layer_id():
    assert is_layer_id(LAYER_ID)
    assert not is_layer_id("sha256:" + LAYER_ID)
    assert not is_layer_id(LAYER_ID.upper())
    assert not is_layer_id(LAYER_ID[:-1])


@pytest.fixture
def package_logger():
    """Restore the package logger after a test configures it."""
    logger = logging.getLogger("docker_archive")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers[:] = handlers


def test_setup_logging_quiets_asyncio(package_logger):
    """setup_logging keeps asyncio at WARNING."""
    setup_logging("debug")

    assert logging.getLogger("asyncio").level == logging.WARNING


def test_setup_logging_configures_package_logger_only(package_logger):
    """The package logger gets the level and a stdout handler; root is untouched."""
    root_handlers = list(logging.getLogger().handlers)

    logger = setup_logging("debug")

    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert logging.getLogger().handlers == root_handlers
    assert logger.handlers


def test_setup_logging_is_idempotent(package_logger):
    """A second call changes the level without adding another handler."""
    setup_logging("debug")
    handlers = list(package_logger.handlers)

    setup_logging("warning")

    assert package_logger.handlers == handlers
    assert package_logger.level == logging.WARNING


def test_setup_logging_writes_to_stdout(package_logger, capsys):
    """Package records are formatted onto stdout."""
    setup_logging("info")

    logging.getLogger("docker_archive.core.builder").info("Created archive")

    out = capsys.readouterr().out
    assert "docker_archive.core.builder - INFO - Created archive" in out

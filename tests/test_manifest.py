"""Tests for repository index and layer manifest rendering."""

import json

import pytest

from docker_archive import DEFAULT_ENVIRONMENT, LAYER_ID, ArchiveConfig, ImageDescriptor
from docker_archive.constants import BUILD_COMMAND, DOCKER_VERSION, HOSTNAME
from docker_archive.core.manifest import (
    build_repositories,
    jsonify_strings,
    parse_layer_manifest,
    render_layer_manifest,
    stringify,
)
from docker_archive.core.types import to_json_fragment


def test_build_repositories():
    """The index maps the image name's latest tag to the layer."""
    assert build_repositories("alpine") == {"alpine": {"latest": LAYER_ID}}


def test_stringify_is_compact_and_sorted():
    """Serialization is canonical: compact separators, sorted keys."""
    assert stringify({"b": [1, None], "a": True}) == '{"a":true,"b":[1,null]}'


def test_jsonify_strings():
    """A list of strings becomes a JSON array literal."""
    text = jsonify_strings(["A=1", 'QUOTE="x"'])

    assert json.loads(text) == ["A=1", 'QUOTE="x"']


def test_render_splices_fragments():
    """cmd and entrypoint are spliced verbatim; Env is serialized."""
    manifest = parse_layer_manifest(
        render_layer_manifest(["A=1"], '["sh", "-c", "true"]', '["/init"]')
    )

    assert manifest["config"]["Env"] == ["A=1"]
    assert manifest["config"]["Cmd"] == ["sh", "-c", "true"]
    assert manifest["config"]["Entrypoint"] == ["/init"]
    assert manifest["config"]["Hostname"] == HOSTNAME
    assert manifest["container_config"]["Cmd"] == BUILD_COMMAND
    assert manifest["docker_version"] == DOCKER_VERSION


def test_render_null_fragments():
    """null fragments stay null."""
    manifest = parse_layer_manifest(
        render_layer_manifest(DEFAULT_ENVIRONMENT, "null", "null")
    )

    assert manifest["config"]["Cmd"] is None
    assert manifest["config"]["Entrypoint"] is None
    assert manifest["config"]["Env"] == list(DEFAULT_ENVIRONMENT)


def test_parse_malformed_fragment():
    """A fragment that is not JSON fails to parse."""
    with pytest.raises(json.JSONDecodeError):
        parse_layer_manifest(render_layer_manifest([], "[unquoted]", "null"))


def test_parse_rejects_non_object():
    """The manifest must be a JSON object."""
    with pytest.raises(ValueError, match="JSON object"):
        parse_layer_manifest("[]")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("null", "null"),
        ('["sh"]', '["sh"]'),
        ("[broken", "[broken"),
        (None, "null"),
        (["sh", "-c"], '["sh", "-c"]'),
        (("echo",), '["echo"]'),
    ],
)
def test_to_json_fragment(value, expected):
    """Strings pass through unchanged; sequences and None are serialized."""
    assert to_json_fragment(value) == expected


def test_image_descriptor_defaults():
    """The default environment holds the sentinel values."""
    image = ImageDescriptor(name="alpine")

    assert image.environment == DEFAULT_ENVIRONMENT
    assert image.cmd == "null"
    assert image.entrypoint == "null"
    assert image.archive_name == "alpine.tar"


def test_image_descriptor_freezes_environment():
    """Mutating the caller's list does not change the descriptor."""
    environment = ["A=1"]
    image = ImageDescriptor(name="alpine", environment=environment)

    environment.append("B=2")

    assert image.environment == ("A=1",)


def test_image_descriptor_requires_name():
    """An empty name is rejected."""
    with pytest.raises(ValueError):
        ImageDescriptor(name="")


def test_image_descriptor_rejects_string_environment():
    """A bare string is not split into one variable per character."""
    with pytest.raises(ValueError, match="not a string"):
        ImageDescriptor(name="alpine", environment="A=1")


def test_archive_config_rejects_string_host_files():
    """A single path must be wrapped in a sequence."""
    with pytest.raises(ValueError, match="not a string"):
        ArchiveConfig(host_files="/bin/sh")


def test_archive_config_freezes_host_files():
    """host_files given as a list is stored as a tuple."""
    host_files = ["/bin/sh"]
    config = ArchiveConfig(host_files=host_files)

    host_files.append("/bin/ls")

    assert config.host_files == ("/bin/sh",)

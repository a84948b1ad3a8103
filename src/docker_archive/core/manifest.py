"""Repository index and layer manifest documents."""

import json
from string import Template
from typing import Any, Dict, Sequence

from ..constants import (
    ARCHITECTURE,
    BUILD_COMMAND,
    CONTAINER_ID,
    CREATED,
    DEFAULT_TAG,
    DOCKER_VERSION,
    HOSTNAME,
    LAYER_ID,
    OS,
)

# Env, Cmd and Entrypoint are spliced in as raw JSON text; everything else
# is substituted as a JSON-encoded constant.
LAYER_MANIFEST_TEMPLATE = Template(
    """
{
    "id": ${layer_id},
    "created": ${created},
    "container": ${container},
    "container_config": {
        "Hostname": ${hostname},
        "Domainname": "",
        "User": "",
        "AttachStdin": false,
        "AttachStdout": false,
        "AttachStderr": false,
        "Tty": false,
        "OpenStdin": false,
        "StdinOnce": false,
        "Env": null,
        "Cmd": ${build_command},
        "Image": "",
        "Volumes": null,
        "WorkingDir": "",
        "Entrypoint": null,
        "OnBuild": null,
        "Labels": null
    },
    "docker_version": ${docker_version},
    "config": {
        "Hostname": ${hostname},
        "Domainname": "",
        "User": "",
        "AttachStdin": false,
        "AttachStdout": false,
        "AttachStderr": false,
        "Tty": false,
        "OpenStdin": false,
        "StdinOnce": false,
        "Env": ${environment},
        "Cmd": ${cmd},
        "Image": "",
        "Volumes": null,
        "WorkingDir": "",
        "Entrypoint": ${entrypoint},
        "OnBuild": null,
        "Labels": null
    },
    "architecture": ${architecture},
    "os": ${os}
}
"""
)


def stringify(value: Any) -> str:
    """Serialize a JSON value to compact text with sorted keys."""
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def jsonify_strings(values: Sequence[str]) -> str:
    """Serialize a list of strings into a JSON array literal."""
    return json.dumps([str(value) for value in values])


def build_repositories(name: str, layer_id: str = LAYER_ID) -> Dict[str, Dict[str, str]]:
    """Build the repository index mapping ``name:latest`` to the layer."""
    return {name: {DEFAULT_TAG: layer_id}}


def render_layer_manifest(
    environment: Sequence[str], cmd: str, entrypoint: str
) -> str:
    """Render the layer manifest template as JSON text.

    ``cmd`` and ``entrypoint`` are raw JSON fragments and are not checked
    here; parse the result with :func:`parse_layer_manifest`.
    """
    return LAYER_MANIFEST_TEMPLATE.substitute(
        layer_id=json.dumps(LAYER_ID),
        created=json.dumps(CREATED),
        container=json.dumps(CONTAINER_ID),
        hostname=json.dumps(HOSTNAME),
        build_command=json.dumps(BUILD_COMMAND),
        docker_version=json.dumps(DOCKER_VERSION),
        architecture=json.dumps(ARCHITECTURE),
        os=json.dumps(OS),
        environment=jsonify_strings(environment),
        cmd=cmd,
        entrypoint=entrypoint,
    )


def parse_layer_manifest(text: str) -> Dict[str, Any]:
    """Parse rendered manifest text.

    Raises:
        json.JSONDecodeError: If a spliced fragment was not valid JSON
        ValueError: If the document is not a JSON object
    """
    manifest = json.loads(text)
    if not isinstance(manifest, dict):
        raise ValueError("Layer manifest must be a JSON object")
    return manifest

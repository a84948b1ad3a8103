"""Fixed identity values embedded in every generated archive."""

LAYER_ID = "815b809d588c80fd6ddf4d6ac244ad1c01ae4cbe0f91cc7480e306671ee9c346"
CONTAINER_ID = "eb53609036555d26c39bdccfa9850426934bdfde96111d099041689b2251a377"
HOSTNAME = CONTAINER_ID[:12]
CREATED = "2016-03-02T17:16:00.167415955Z"
DOCKER_VERSION = "1.9.1"
ARCHITECTURE = "amd64"
OS = "linux"

# Build step recorded in container_config.Cmd
ADD_FILE_DIGEST = "81ba6f20bdb99e6c13c434a577069860b6656908031162083b1ac9c02c71dd9f"
BUILD_COMMAND = ["/bin/sh", "-c", f"#(nop) ADD file:{ADD_FILE_DIGEST} in /"]

DEFAULT_TAG = "latest"
LAYER_VERSION = "1.0"

REPOSITORIES_FILE = "repositories"
LAYER_MANIFEST_FILE = "json"
LAYER_TAR_FILE = "layer.tar"
LAYER_VERSION_FILE = "VERSION"
ROOTFS_DIR = "layer"

# Implausible on purpose: a process that inherits these fails loudly.
DEFAULT_ENVIRONMENT = (
    "LD_LIBRARY_PATH=invalid",
    "LIBPROCESS_IP=invalid",
    "LIBPROCESS_PORT=invalid",
)

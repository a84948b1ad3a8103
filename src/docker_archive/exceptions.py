"""Custom exceptions for docker archive construction."""


class DockerArchiveError(Exception):
    """Base exception for all docker archive errors."""

    pass


class ArchiveBuildError(DockerArchiveError):
    """Raised when any step of building a docker test archive fails."""

    pass


class PackError(DockerArchiveError):
    """Raised when packing a directory into a tar file fails."""

    pass


class RootfsError(DockerArchiveError):
    """Raised when a root filesystem tree cannot be created."""

    pass


class TarReadError(DockerArchiveError):
    """Raised when unable to read or parse an archive."""

    pass


class ValidationError(DockerArchiveError):
    """Raised when an archive is missing required structure."""

    pass

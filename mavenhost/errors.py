"""Exceptions raised by the upload and indexing pipeline."""


class MavenHostError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500


class InvalidScope(MavenHostError):
    """The artifact path does not fall under the repository root."""

    status_code = 401


class Forbidden(MavenHostError):
    """The repository is not allowed, or the caller is not authorized for it."""

    status_code = 401


class EmptyBody(MavenHostError):
    status_code = 400


class StorageUnavailable(MavenHostError):
    """A content store or index memory call failed."""

    status_code = 500

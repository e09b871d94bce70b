"""
Helpers for artifact and directory paths.

Artifact paths are slash-delimited and rooted under the repository root (e.g. repository/releases/...).
A directory path is a prefix ending in a slash. Paths travel through the pipeline in URL form,
where a space is written as +; the content store keys use the space.
"""

from mavenhost.errors import InvalidScope

CONTENT_TYPES = {
    ".jar": "application/java-archive",
    ".xml": "application/xml",
    ".pom": "application/xml",
    ".json": "application/json",
    ".module": "application/json",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"
LISTING_CONTENT_TYPE = "text/html"


def storage_key(path: str) -> str:
    return path.replace("+", " ")


def url_path(key: str) -> str:
    return key.replace(" ", "+")


def directory_of(path: str) -> str:
    """The directory containing this artifact, including the trailing slash"""
    return path[: path.rfind("/") + 1]


def parent_directory(directory: str, root: str) -> str | None:
    """
    The parent of a directory path, or None if the directory is the repository root
    (or lies outside of it), which terminates any walk up the tree.
    """
    if directory == root or not directory.startswith(root):
        return None
    name = directory.rstrip("/")
    if "/" not in name:
        return None
    return name[: name.rfind("/") + 1]


def repository_name(path: str, root: str) -> str:
    rest = path[len(root) :]
    return rest.split("/", 1)[0]


def content_type_for(path: str) -> str:
    for extension, content_type in CONTENT_TYPES.items():
        if path.endswith(extension):
            return content_type
    return DEFAULT_CONTENT_TYPE


def validate_artifact_path(path: str, root: str) -> str:
    """
    Check that the path names a file inside a repository under the root, returning it in URL form.
    Raises InvalidScope otherwise.
    """
    path = url_path(path)
    if not path.startswith(root):
        raise InvalidScope("Trying to push outside of repository.")
    segments = path[len(root) :].split("/")
    if len(segments) < 2:
        raise InvalidScope("Artifact path must include a repository and a file name.")
    if any(segment in ("", ".", "..") for segment in segments):
        raise InvalidScope(f"Invalid artifact path {path!r}.")
    return path

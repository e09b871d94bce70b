from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

RepositoryScope = Annotated[
    str,
    Field(pattern=r"^(\*|[^/\s]+)$", title="A repository name, or * for all repositories"),
]


class AuthorizedUser(BaseModel):
    """An entry in the credential table used for upload authorization."""

    username: str
    password: str = Field(description="Hex SHA-256 digest of salt + password")
    scope: RepositoryScope = "*"
    salt: str = ""


WorkItemKind = Literal["upload", "index"]


class WorkItem(BaseModel):
    """
    An at-least-once message for the indexing pipeline.

    - upload: an artifact was stored at `path` (purge the file, index its directory)
    - index: the directory `path` needs its listing (and possibly its ancestors') regenerated
    """

    model_config = ConfigDict(frozen=True)

    kind: WorkItemKind
    path: str

    @classmethod
    def upload(cls, path: str) -> "WorkItem":
        return cls(kind="upload", path=path)

    @classmethod
    def index(cls, directory: str) -> "WorkItem":
        return cls(kind="index", path=directory)

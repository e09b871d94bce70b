"""
mavenhost Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the MAVENHOST_ENV_FILE environment variable

List values (allowed_repos, authorized_users) are given as JSON, e.g.
MAVENHOST_ALLOWED_REPOS='["releases", "snapshots"]'
MAVENHOST_AUTHORIZED_USERS='[{"username": "ci", "password": "<sha256 hex>", "scope": "releases"}]'
"""

import functools
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mavenhost.models import AuthorizedUser

ENV_PREFIX = "mavenhost_"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    origin: Annotated[
        str,
        Field(
            description="Public origin the repository is served from, used to build the URLs to purge from the CDN",
        ),
    ] = "http://localhost:5001"

    prefix: Annotated[
        str,
        Field(
            description="URL path prefix in front of the repository root, stripped before resolving artifact paths",
        ),
    ] = ""

    repository_root: Annotated[
        str,
        Field(
            description="Top-level directory all repositories live under (must end with a slash)",
        ),
    ] = "repository/"

    allowed_repos: Annotated[list[str], Field(description="Repositories that accept uploads")] = []

    authorized_users: Annotated[
        list[AuthorizedUser],
        Field(description="Credential table: username, hashed password, optional salt and scope"),
    ] = []

    listing_title: Annotated[str, Field(description="Title of the generated directory listing pages")] = "Maven"

    s3_host: Annotated[str | None, Field(description="S3-compatible endpoint URL")] = None
    s3_region: Annotated[str | None, Field()] = None
    s3_bucket: Annotated[str, Field(description="Bucket holding artifacts and listing pages")] = "maven"
    s3_access_key: Annotated[str | None, Field()] = None
    s3_secret_key: Annotated[str | None, Field()] = None

    elastic_host: Annotated[
        str | None,
        Field(
            description=(
                "Elasticsearch host used to store the index markers. "
                "If not set, markers are kept in memory and forgotten on restart"
            )
        ),
    ] = None

    elastic_password: Annotated[
        str | None,
        Field(
            description=(
                "Elasticsearch password. This the password for the 'elastic' user when Elastic xpack security is enabled"
            )
        ),
    ] = None

    elastic_verify_ssl: Annotated[bool | None, Field(description="Elasticsearch verify SSL (only used with a password)")] = None

    marker_index: Annotated[str, Field(description="Elasticsearch index to store the index markers in")] = "mavenhost_markers"

    cloudflare_zone: Annotated[str | None, Field(description="Cloudflare zone id to purge cached URLs from")] = None
    cloudflare_token: Annotated[str | None, Field(description="Cloudflare API token with cache purge permission")] = None
    purge_api_url: Annotated[str, Field()] = "https://api.cloudflare.com/client/v4"
    purge_batch_size: Annotated[int, Field(gt=0, description="Maximum number of URLs per purge request")] = 30

    queue_batch_size: Annotated[int, Field(gt=0, description="Maximum number of work items handled per batch")] = 100
    queue_max_attempts: Annotated[int, Field(gt=0, description="Deliveries of a work item before it is dropped")] = 5
    queue_retry_delay: Annotated[float, Field(ge=0, description="Seconds before a failed work item is redelivered")] = 5.0
    shutdown_timeout: Annotated[float, Field(ge=0, description="Seconds to finish pending work on shutdown")] = 30.0

    @model_validator(mode="after")
    def check_paths(self: Any) -> "Settings":
        if not self.repository_root.endswith("/") or self.repository_root.startswith("/"):
            raise ValueError(f"repository_root must end with a slash and not start with one: {self.repository_root!r}")
        self.prefix = self.prefix.strip("/")
        if self.elastic_host and self.elastic_verify_ssl is None:
            self.elastic_verify_ssl = self.elastic_host not in {
                "http://localhost:9200",
                "https://localhost:9200",
            }
        return self

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


def s3_enabled(settings: Settings) -> bool:
    return all([settings.s3_host, settings.s3_access_key, settings.s3_secret_key])


def purge_enabled(settings: Settings) -> bool:
    return bool(settings.cloudflare_zone and settings.cloudflare_token)


def validate_settings(settings: Settings) -> list[str]:
    warnings = []
    if not settings.allowed_repos:
        warnings.append("No allowed repositories configured, all uploads will be refused")
    if not settings.authorized_users:
        warnings.append("No authorized users configured, all uploads will be refused")
    if not s3_enabled(settings):
        warnings.append("S3 is not configured, artifacts are stored in memory and lost on restart")
    if not settings.elastic_host:
        warnings.append("Elasticsearch is not configured, index markers are kept in memory")
    if not purge_enabled(settings):
        warnings.append("Cloudflare zone or token not configured, CDN purging is disabled")
    return warnings


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")

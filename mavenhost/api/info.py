"""API Endpoints for server information and configuration."""

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mavenhost.api.common import get_services
from mavenhost.config import purge_enabled, s3_enabled, validate_settings
from mavenhost.connections import MavenServices

app_info = APIRouter(tags=["informational"])


class ConfigResponse(BaseModel):
    repository_root: str = Field(..., description="Top-level directory all repositories live under")
    allowed_repos: list[str] = Field(..., description="Repositories that accept uploads")
    s3_enabled: bool = Field(..., description="Whether S3 storage is configured.")
    elastic_enabled: bool = Field(..., description="Whether index markers are stored in Elasticsearch.")
    purge_enabled: bool = Field(..., description="Whether changed paths are purged from the CDN.")
    pending_work: int = Field(..., description="Number of work items waiting in the queue")
    warnings: list[str] = Field(..., description="A list of configuration warnings.")
    api_version: str = Field(..., description="The version of the mavenhost API.")


def _version() -> str:
    try:
        return version("mavenhost")
    except PackageNotFoundError:
        return "unknown"


@app_info.get("/config")
def get_config(services: MavenServices = Depends(get_services)) -> ConfigResponse:
    """Get the configuration of this repository host."""
    settings = services.settings
    return ConfigResponse(
        repository_root=settings.repository_root,
        allowed_repos=settings.allowed_repos,
        s3_enabled=s3_enabled(settings),
        elastic_enabled=bool(settings.elastic_host),
        purge_enabled=purge_enabled(settings),
        pending_work=services.queue.pending(),
        warnings=validate_settings(settings),
        api_version=_version(),
    )

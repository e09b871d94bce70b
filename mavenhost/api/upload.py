"""API endpoint for uploading artifacts."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from mavenhost.api.common import get_services
from mavenhost.connections import MavenServices

app_upload = APIRouter(tags=["upload"])


class UploadResponse(BaseModel):
    message: str = Field(description="Human readable status")
    path: str = Field(description="The artifact path the upload was stored at")


@app_upload.put("/{path:path}")
async def upload_artifact(path: str, request: Request, services: MavenServices = Depends(get_services)) -> UploadResponse:
    """
    Upload an artifact to <repository root>/<repository>/<path>, using HTTP Basic authentication.

    The artifact is stored before the response is sent. Directory listings and CDN purging
    are handled in the background.
    """
    body = await request.body()
    stored = await services.intake.upload(path, body, request.headers.get("authorization"))
    return UploadResponse(message="Upload successful.", path=stored)

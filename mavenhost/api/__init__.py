"""mavenhost API: upload endpoint of a Maven package repository."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mavenhost.api.info import app_info
from mavenhost.api.upload import app_upload
from mavenhost.config import get_settings, validate_settings
from mavenhost.connections import mavenhost_connections
from mavenhost.errors import MavenHostError

logger = logging.getLogger("mavenhost.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    for warning in validate_settings(settings):
        logger.warning(warning)
    async with mavenhost_connections(settings) as services:
        app.state.services = services
        services.start()
        yield
        await services.stop()


app = FastAPI(
    title="mavenhost",
    description=__doc__ if __doc__ else "",
    openapi_tags=[
        dict(name="upload", description="Endpoint to upload artifacts"),
        dict(name="informational", description="Server information and configuration"),
    ],
    lifespan=lifespan,
)
app.include_router(app_info)
app.include_router(app_upload)


@app.exception_handler(MavenHostError)
async def mavenhost_exception_handler(request: Request, exc: MavenHostError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc)},
    )

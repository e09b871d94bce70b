"""Helper methods for the API."""

from fastapi import Request

from mavenhost.connections import MavenServices


def get_services(request: Request) -> MavenServices:
    """The services container set up in the application lifespan (or by the tests)."""
    return request.app.state.services

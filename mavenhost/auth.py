"""
Upload authorization against the configured credential table.

Callers authenticate with HTTP Basic credentials. The table stores the hex SHA-256 digest of
salt + password, and a scope that is either a single repository name or * for all repositories.
"""

import base64
import binascii
import hashlib
import hmac
import logging
from typing import Iterable

from mavenhost.models import AuthorizedUser

logger = logging.getLogger("mavenhost.auth")


def hash_password(password: str, salt: str = "") -> str:
    return hashlib.sha256((salt + password).encode("utf-8")).hexdigest()


def parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """Return (username, password) from a Basic authorization header, or None if it is absent or malformed"""
    if not header:
        return None
    scheme, _, param = header.partition(" ")
    if scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(param.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, separator, password = decoded.partition(":")
    if not separator:
        return None
    return username, password


def authorize(header: str | None, repository: str, users: Iterable[AuthorizedUser]) -> bool:
    credentials = parse_basic_auth(header)
    if credentials is None:
        return False
    username, password = credentials
    for user in users:
        if user.username != username or user.scope not in ("*", repository):
            continue
        if hmac.compare_digest(user.password.lower(), hash_password(password, user.salt)):
            return True
    logger.info(f"Rejected credentials for {username} on repository {repository}")
    return False

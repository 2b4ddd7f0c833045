"""Extraction of API keys from request headers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

AUTH_SCHEME = "ApiKey"


class AuthError(Exception):
    """Base class for authorization header problems."""


class NoAuthHeaderIncludedError(AuthError):
    """Raised when the request carries no Authorization header."""

    def __init__(self) -> None:
        super().__init__("no authorization header included")


class MalformedAuthHeaderError(AuthError):
    """Raised when the Authorization header is not of the form 'ApiKey <key>'."""

    def __init__(self) -> None:
        super().__init__("malformed authorization header")


def _authorization_value(headers: Mapping[str, Any]) -> str:
    """Return the first Authorization value, matching the name case-insensitively."""
    for name, value in headers.items():
        if name.lower() != "authorization":
            continue
        if isinstance(value, (list, tuple)):
            return value[0] if value else ""
        return value
    return ""


def get_api_key(headers: Mapping[str, Any]) -> str:
    """Return the API key from an 'Authorization: ApiKey <key>' header."""
    auth_header = _authorization_value(headers)
    if not auth_header:
        raise NoAuthHeaderIncludedError()
    parts = auth_header.split(" ")
    if len(parts) < 2 or parts[0] != AUTH_SCHEME:
        raise MalformedAuthHeaderError()
    return parts[1]
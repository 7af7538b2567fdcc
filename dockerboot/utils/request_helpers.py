"""Shared request helper utilities."""

from typing import Optional

from fastapi import Request


def extract_api_key(request: Request) -> Optional[str]:
    """Extract API key from request headers.

    Checks in order:
    1. x-api-key header (preferred)
    2. Authorization header with Bearer token
    3. Authorization header with ApiKey token
    """
    api_key = request.headers.get("x-api-key")
    if api_key:
        return api_key

    auth_header = request.headers.get("authorization")
    if auth_header:
        if auth_header.startswith("Bearer "):
            return auth_header[7:]
        elif auth_header.startswith("ApiKey "):
            return auth_header[7:]

    return None

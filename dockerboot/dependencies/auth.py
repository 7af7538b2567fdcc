"""Authentication dependencies for API endpoints."""

# Standard library imports
import secrets
from typing import Optional

# Third-party imports
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Local application imports
from ..config import settings
from ..utils.request_helpers import extract_api_key

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Verify the API key sent with a container control request."""
    api_key = extract_api_key(request)

    if not api_key:
        logger.warning("No API key provided in request", path=request.url.path)
        raise HTTPException(
            status_code=401,
            detail="API key required. Provide it in x-api-key header or Authorization header.",
        )

    if not secrets.compare_digest(api_key.encode(), settings.api_key.encode()):
        logger.warning("Invalid API key provided", path=request.url.path)
        raise HTTPException(status_code=401, detail="Invalid API key")

    return api_key

"""
Authentication Utility - the request gate for protected routes.

The access token is read from the `accessToken` cookie first, then from
an `Authorization: Bearer <token>` header.
"""

import logging
from typing import Optional
from fastapi import Cookie, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from portal.api.deps import get_user_store
from portal.core.errors import UnauthorizedError
from portal.core.security import TokenCodec, TokenError, get_access_codec
from portal.services.mongo_service import UserStore

logger = logging.getLogger(__name__)

# Bearer token extractor (cookie is an alternative, so no auto error)
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    access_token: Optional[str] = Cookie(None, alias="accessToken"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: UserStore = Depends(get_user_store),
    codec: TokenCodec = Depends(get_access_codec),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user (sanitized).

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    token = access_token or (credentials.credentials if credentials else None)
    if not token:
        raise UnauthorizedError("Unauthorized request")

    try:
        payload = codec.verify(token)
    except TokenError:
        raise UnauthorizedError("Invalid access token")

    user = users.find_by_id(payload["sub"])
    if not user:
        logger.warning("Access token for missing user %s", payload["sub"])
        raise UnauthorizedError("Invalid access token")

    return user

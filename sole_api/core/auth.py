"""Bearer-token authentication dependency.

Routes that act on behalf of a user declare ``Depends(get_current_user_id)``;
the dependency resolves the ``sub`` claim of a valid access token.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sole_api.core.errors import AuthenticationAppError
from sole_api.core.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """FastAPI dependency returning the authenticated user's id.

    Raises:
        AuthenticationAppError: 401 when the header is missing or the token
            does not verify.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        logger.info("auth.missing_token")
        raise AuthenticationAppError(
            code="missing_token",
            message="Missing bearer token. Provide an Authorization: Bearer header.",
        )

    try:
        payload = decode_access_token(credentials.credentials)
    except AuthenticationAppError:
        logger.warning("auth.invalid_token")
        raise

    return str(payload["sub"])

"""Bearer token validation for the identity collaborator (HS256 JWT)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger(__name__)


def validate_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing JWT configuration",
        )

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False, "require_exp": True},
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except (JWTClaimsError, JWTError) as e:
        logger.info("Rejected token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def extract_user_id(payload: dict[str, Any]) -> str | None:
    """Return the caller id from ``sub``, or from the legacy ``{"user": {"id": ...}}`` claim."""
    subject = payload.get("sub")
    if isinstance(subject, str) and subject:
        return subject

    legacy = payload.get("user")
    if isinstance(legacy, dict):
        user_id = legacy.get("id")
        if isinstance(user_id, str | int) and str(user_id):
            return str(user_id)

    return None

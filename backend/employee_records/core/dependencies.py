from __future__ import annotations

import logging

from fastapi import Header, HTTPException, Request, status

from employee_records.core.auth import extract_user_id, validate_token
from employee_records.core.config import settings
from employee_records.models.auth import UserInfo
from employee_records.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(None),
    x_auth_token: str | None = Header(None),
) -> UserInfo:
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
    elif x_auth_token:
        token = x_auth_token.strip()
    else:
        raise _unauthorized("Not authenticated")

    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = validate_token(token, settings.JWT_SECRET, settings.JWT_ALGORITHM)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise _unauthorized("Invalid authentication credentials") from e

    user_id = extract_user_id(payload)
    if not user_id:
        raise _unauthorized("Invalid authentication credentials")

    return UserInfo(id=user_id, email=payload.get("email"))


def get_employee_service(request: Request) -> EmployeeService:
    service: EmployeeService | None = getattr(request.app.state, "employee_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Employee store is not available",
        )
    return service

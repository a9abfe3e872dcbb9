from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from employee_records.core.dependencies import get_current_user, get_employee_service
from employee_records.models.auth import UserInfo
from employee_records.models.employee import EmployeeDetail, EmployeeSummary, HistoryEntry
from employee_records.services.employee_service import (
    EmployeeConflictError,
    EmployeeNotFoundError,
    EmployeeService,
    EmployeeValidationError,
)
from employee_records.stores.base import StoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _http_error(err: Exception, action: str) -> HTTPException:
    if isinstance(err, EmployeeValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Validation failed",
                "errors": [v.model_dump() for v in err.violations],
            },
        )
    if isinstance(err, EmployeeNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    if isinstance(err, EmployeeConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"An employee with email '{err.email}' already exists",
        )
    if isinstance(err, StoreUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Employee store is not available",
        )
    logger.exception("Failed to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("", response_model=list[EmployeeSummary])
async def list_employees(
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.list_employees()
    except Exception as err:
        raise _http_error(err, "retrieve employees") from err


@router.get("/{employee_id}", response_model=EmployeeDetail)
async def get_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.get_employee(employee_id)
    except Exception as err:
        raise _http_error(err, "retrieve employee") from err


@router.get("/{employee_id}/history", response_model=list[HistoryEntry])
async def get_employee_history(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.get_history(employee_id)
    except Exception as err:
        raise _http_error(err, "retrieve employee history") from err


@router.post("", response_model=EmployeeDetail, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: Any = Body(None),  # noqa: B008
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.create_employee(payload)
    except Exception as err:
        raise _http_error(err, "create employee") from err


@router.put("/{employee_id}", response_model=EmployeeDetail)
async def update_employee(
    employee_id: str,
    payload: Any = Body(None),  # noqa: B008
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.update_employee(employee_id, payload, actor=user.id)
    except Exception as err:
        raise _http_error(err, "update employee") from err


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        await service.delete_employee(employee_id)
    except Exception as err:
        raise _http_error(err, "delete employee") from err
    return {"message": "Employee removed"}

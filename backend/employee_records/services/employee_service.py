"""Versioned employee records: CRUD with a pre-image history on every update."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from employee_records.models.employee import (
    MUTABLE_FIELDS,
    EmployeeDetail,
    EmployeeFields,
    EmployeeSnapshot,
    EmployeeSummary,
    FieldViolation,
    HistoryEntry,
)
from employee_records.stores.base import DuplicateKeyError, EmployeeStore

logger = logging.getLogger(__name__)

_LIST_ORDER_FIELD = "joiningDate"
_SUMMARY_FIELDS: list[str] = [
    field.alias or name for name, field in EmployeeSummary.model_fields.items()
]


class EmployeeServiceError(Exception):
    """Base class for employee service errors."""


class EmployeeValidationError(EmployeeServiceError):
    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = violations
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Invalid employee fields: {fields}")


class EmployeeConflictError(EmployeeServiceError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"An employee with email '{email}' already exists")


class EmployeeNotFoundError(EmployeeServiceError):
    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee '{employee_id}' not found")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def validate_employee_fields(payload: Any) -> EmployeeFields:
    """Validate a raw payload, reporting every violated field at once."""
    if not isinstance(payload, dict):
        raise EmployeeValidationError(
            [FieldViolation(field="body", message="Expected a JSON object")]
        )
    try:
        return EmployeeFields.model_validate(payload)
    except ValidationError as e:
        # One violation per field; union members report separate errors
        messages: dict[str, list[str]] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "body"
            messages.setdefault(field, []).append(error["msg"])
        violations = [
            FieldViolation(field=field, message="; ".join(dict.fromkeys(msgs)))
            for field, msgs in messages.items()
        ]
        raise EmployeeValidationError(violations) from e


def _is_well_formed_id(employee_id: str) -> bool:
    try:
        uuid.UUID(employee_id)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


class EmployeeService:
    """Versioned record store for employees.

    Every update archives the record's current mutable fields as a
    ``HistoryEntry`` before overwriting them, then persists fields,
    ``updatedAt`` and the extended history in a single store write. New
    records start with an empty history.

    Concurrent updates to the same record are not coordinated: the later
    write wins, including the history entry built from the pre-image it read.
    """

    def __init__(
        self,
        store: EmployeeStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._clock = clock

    async def create_employee(self, payload: Any) -> EmployeeDetail:
        fields = validate_employee_fields(payload)

        if await self.store.find_one({"email": fields.email}) is not None:
            raise EmployeeConflictError(fields.email)

        document = fields.model_dump(mode="json", by_alias=True)
        document["createdAt"] = self._clock().isoformat()
        document["updatedAt"] = None
        document["history"] = []

        try:
            stored = await self.store.insert(document)
        except DuplicateKeyError as e:
            raise EmployeeConflictError(fields.email) from e

        employee = EmployeeDetail.model_validate(stored)
        logger.info("Created employee %s", employee.id)
        return employee

    async def get_employee(self, employee_id: str) -> EmployeeDetail:
        return EmployeeDetail.model_validate(await self._load(employee_id))

    async def list_employees(self) -> list[EmployeeSummary]:
        documents = await self.store.find_all(
            order_by=_LIST_ORDER_FIELD,
            descending=True,
            fields=_SUMMARY_FIELDS,
        )
        return [EmployeeSummary.model_validate(d) for d in documents]

    async def get_history(self, employee_id: str) -> list[HistoryEntry]:
        return (await self.get_employee(employee_id)).history

    async def update_employee(
        self,
        employee_id: str,
        payload: Any,
        actor: str | None = None,
    ) -> EmployeeDetail:
        fields = validate_employee_fields(payload)
        current = EmployeeDetail.model_validate(await self._load(employee_id))

        if fields.email != current.email:
            holder = await self.store.find_one({"email": fields.email})
            if holder is not None and holder.get("id") != current.id:
                raise EmployeeConflictError(fields.email)

        now = self._clock()
        # Pre-image is taken from the loaded record, never from the new fields
        entry = HistoryEntry(
            changed_at=now,
            changed_by=actor,
            data=EmployeeSnapshot(**{name: getattr(current, name) for name in MUTABLE_FIELDS}),
        )

        updated = current.model_copy(
            update={
                **{name: getattr(fields, name) for name in MUTABLE_FIELDS},
                "updated_at": now,
                "history": [*current.history, entry],
            }
        )
        document = updated.model_dump(mode="json", by_alias=True, exclude={"id"})

        try:
            stored = await self.store.update_by_id(current.id, document)
        except DuplicateKeyError as e:
            raise EmployeeConflictError(fields.email) from e
        if stored is None:
            raise EmployeeNotFoundError(employee_id)

        employee = EmployeeDetail.model_validate(stored)
        logger.info(
            "Updated employee %s by %s (history=%d)",
            employee.id,
            actor or "anonymous",
            len(employee.history),
        )
        return employee

    async def delete_employee(self, employee_id: str) -> None:
        if not _is_well_formed_id(employee_id) or not await self.store.delete_by_id(employee_id):
            raise EmployeeNotFoundError(employee_id)
        logger.info("Deleted employee %s", employee_id)

    async def check_connection(self) -> bool:
        return await self.store.check_connection()

    async def _load(self, employee_id: str) -> dict[str, Any]:
        if not _is_well_formed_id(employee_id):
            raise EmployeeNotFoundError(employee_id)
        document = await self.store.find_by_id(employee_id)
        if document is None:
            raise EmployeeNotFoundError(employee_id)
        return document

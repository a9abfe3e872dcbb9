"""Employee record models: mutable fields, history entries and API shapes."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MAX_EXPERIENCE = 50

# Calendar date, optionally followed by an ISO-8601 time part
_ISO_DATE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})"
    r"(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$"
)


class CamelModel(BaseModel):
    """Stored and served with camelCase keys; accepts snake_case names too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeSnapshot(CamelModel):
    """The seven mutable fields, unconstrained, as kept in history."""

    name: str
    email: str
    address: str
    experience: int | float
    last_work_company: str
    date_of_resignation: date
    joining_date: date


class EmployeeFields(EmployeeSnapshot):
    """Validated input for create and update."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=1, pattern=EMAIL_PATTERN)
    address: str = Field(..., min_length=1, max_length=100)
    experience: int | float
    last_work_company: str = Field(..., min_length=1, max_length=50)
    date_of_resignation: date
    joining_date: date

    @field_validator("experience", mode="before")
    @classmethod
    def _experience_is_numeric(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float | str):
            raise ValueError("must be a number")
        return value

    @field_validator("experience")
    @classmethod
    def _experience_in_range(cls, value: int | float) -> int | float:
        if not 0 <= value <= MAX_EXPERIENCE:
            raise ValueError(f"must be between 0 and {MAX_EXPERIENCE}")
        return value

    @field_validator("date_of_resignation", "joining_date", mode="before")
    @classmethod
    def _date_is_iso_string(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("must be an ISO-8601 date string")
        match = _ISO_DATE.match(value.strip())
        if match is None:
            raise ValueError("must be an ISO-8601 date string")
        return match.group(1)


MUTABLE_FIELDS: tuple[str, ...] = tuple(EmployeeSnapshot.model_fields)


class HistoryEntry(CamelModel):
    changed_at: datetime
    changed_by: str | None = None
    data: EmployeeSnapshot


class EmployeeSummary(EmployeeSnapshot):
    """Employee as listed: every field except history."""

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EmployeeDetail(EmployeeSummary):
    """Full employee record including its change history."""

    history: list[HistoryEntry] = []


class FieldViolation(BaseModel):
    field: str
    message: str

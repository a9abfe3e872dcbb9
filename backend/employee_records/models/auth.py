"""Authenticated caller identity."""

from __future__ import annotations

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: str
    email: str | None = None

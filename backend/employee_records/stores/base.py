"""Abstract document store for employee records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from employee_records.core.config import Settings

Document = dict[str, Any]


class StoreError(Exception):
    """Base class for document store errors."""


class DuplicateKeyError(StoreError):
    """Raised when a write violates the unique constraint on ``email``."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for unique field '{field}': {value!r}")


class StoreUnavailableError(StoreError):
    """Raised when the store is used before ``connect`` succeeded."""


class EmployeeStore(ABC):
    """Identifier-keyed CRUD over employee documents.

    Implementations assign ``id`` on insert and enforce uniqueness of
    ``email`` across live documents. Documents go in and come out as plain
    JSON-compatible dicts with camelCase keys.
    """

    UNIQUE_FIELD = "email"

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the store is ready to serve requests."""

    @abstractmethod
    async def connect(self, settings: Settings) -> None:
        """Open the underlying client. A no-op when already connected."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""

    @abstractmethod
    async def find_one(self, filter: Document) -> Document | None:
        """Return the first document whose fields equal every item of ``filter``."""

    @abstractmethod
    async def find_by_id(self, doc_id: str) -> Document | None:
        """Return the document with ``doc_id``, or None."""

    @abstractmethod
    async def find_all(
        self,
        *,
        order_by: str,
        descending: bool = False,
        fields: list[str] | None = None,
    ) -> list[Document]:
        """Return every document sorted on ``order_by``, optionally projected to ``fields``."""

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        """Persist a new document, assigning its ``id``. Returns the stored document."""

    @abstractmethod
    async def update_by_id(self, doc_id: str, document: Document) -> Document | None:
        """Replace the whole document in one write. Returns None if it does not exist."""

    @abstractmethod
    async def delete_by_id(self, doc_id: str) -> bool:
        """Delete the document. Returns False if it did not exist."""

    @abstractmethod
    async def check_connection(self) -> bool:
        """Round-trip to the backend."""

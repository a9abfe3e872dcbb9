"""In-memory implementation of EmployeeStore."""

from __future__ import annotations

import copy
import logging
import uuid

from employee_records.core.config import Settings
from employee_records.stores.base import (
    Document,
    DuplicateKeyError,
    EmployeeStore,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)


class InMemoryEmployeeStore(EmployeeStore):
    """Dict-backed store for testing and local development.

    Documents are deep-copied on the way in and out so callers never share
    state with the store. Not suitable for production use.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self, settings: Settings | None = None) -> None:
        if self._connected:
            return
        self._connected = True
        logger.info("InMemoryEmployeeStore connected")

    async def close(self) -> None:
        self._connected = False

    async def find_one(self, filter: Document) -> Document | None:
        self._ensure_connected()
        for document in self._documents.values():
            if all(document.get(key) == value for key, value in filter.items()):
                return copy.deepcopy(document)
        return None

    async def find_by_id(self, doc_id: str) -> Document | None:
        self._ensure_connected()
        document = self._documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def find_all(
        self,
        *,
        order_by: str,
        descending: bool = False,
        fields: list[str] | None = None,
    ) -> list[Document]:
        self._ensure_connected()
        documents = sorted(
            self._documents.values(),
            key=lambda d: d.get(order_by) or "",
            reverse=descending,
        )
        if fields is None:
            return [copy.deepcopy(d) for d in documents]
        return [{key: copy.deepcopy(d[key]) for key in fields if key in d} for d in documents]

    async def insert(self, document: Document) -> Document:
        self._ensure_connected()
        stored = copy.deepcopy(document)
        stored["id"] = uuid.uuid4().hex
        self._check_unique(stored, exclude_id=None)
        self._documents[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update_by_id(self, doc_id: str, document: Document) -> Document | None:
        self._ensure_connected()
        if doc_id not in self._documents:
            return None
        stored = copy.deepcopy(document)
        stored["id"] = doc_id
        self._check_unique(stored, exclude_id=doc_id)
        self._documents[doc_id] = stored
        return copy.deepcopy(stored)

    async def delete_by_id(self, doc_id: str) -> bool:
        self._ensure_connected()
        return self._documents.pop(doc_id, None) is not None

    async def check_connection(self) -> bool:
        return self._connected

    def _check_unique(self, document: Document, exclude_id: str | None) -> None:
        value = document.get(self.UNIQUE_FIELD)
        for other_id, other in self._documents.items():
            if other_id != exclude_id and other.get(self.UNIQUE_FIELD) == value:
                raise DuplicateKeyError(self.UNIQUE_FIELD, value)

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise StoreUnavailableError("InMemoryEmployeeStore is not connected")

"""Azure Cosmos DB implementation of EmployeeStore."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from employee_records.core.config import Settings
from employee_records.stores.base import (
    Document,
    DuplicateKeyError,
    EmployeeStore,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

# Every document lives in one logical partition so the unique key policy on
# /email spans the whole collection.
_PARTITION_KEY_PATH = "/kind"
_PARTITION_VALUE = "employee"

# Cosmos system properties stripped from documents handed back to callers
_SYSTEM_FIELDS = ("kind", "_rid", "_self", "_etag", "_attachments", "_ts")


def _strip_system_fields(item: dict[str, Any]) -> Document:
    return {key: value for key, value in item.items() if key not in _SYSTEM_FIELDS}


class CosmosEmployeeStore(EmployeeStore):
    def __init__(self) -> None:
        self.client: CosmosClient | None = None
        self.container: Any = None

    @property
    def connected(self) -> bool:
        return self.container is not None

    async def connect(self, settings: Settings) -> None:
        if self.connected:
            return

        endpoint = settings.COSMOS_DB_ENDPOINT
        key = settings.COSMOS_DB_KEY
        database_name = settings.COSMOS_DB_DATABASE
        container_name = settings.COSMOS_DB_EMPLOYEES_CONTAINER

        if not endpoint or not key:
            logger.warning("Cosmos DB credentials missing — employee store not connected")
            return

        self.client = CosmosClient(endpoint, key)
        db = await self.client.create_database_if_not_exists(id=database_name)
        self.container = await db.create_container_if_not_exists(
            id=container_name,
            partition_key=PartitionKey(path=_PARTITION_KEY_PATH),
            unique_key_policy={"uniqueKeys": [{"paths": [f"/{self.UNIQUE_FIELD}"]}]},
        )
        logger.info("CosmosEmployeeStore connected (container=%s)", container_name)

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.container = None

    async def find_one(self, filter: Document) -> Document | None:
        container = self._require_container()

        clauses = [f"c.{field} = @{field}" for field in filter]
        query = "SELECT * FROM c"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        params: list[dict[str, Any]] = [
            {"name": f"@{field}", "value": value} for field, value in filter.items()
        ]

        async for item in container.query_items(
            query=query,
            parameters=params,
            partition_key=_PARTITION_VALUE,
        ):
            return _strip_system_fields(item)
        return None

    async def find_by_id(self, doc_id: str) -> Document | None:
        container = self._require_container()
        try:
            item = await container.read_item(item=doc_id, partition_key=_PARTITION_VALUE)
        except CosmosResourceNotFoundError:
            return None
        return _strip_system_fields(item)

    async def find_all(
        self,
        *,
        order_by: str,
        descending: bool = False,
        fields: list[str] | None = None,
    ) -> list[Document]:
        container = self._require_container()

        projection = ", ".join(f"c.{field}" for field in fields) if fields else "*"
        direction = "DESC" if descending else "ASC"
        query = f"SELECT {projection} FROM c ORDER BY c.{order_by} {direction}"

        results: list[Document] = []
        async for item in container.query_items(query=query, partition_key=_PARTITION_VALUE):
            results.append(_strip_system_fields(item))
        return results

    async def insert(self, document: Document) -> Document:
        container = self._require_container()
        body = {**document, "id": uuid.uuid4().hex, "kind": _PARTITION_VALUE}
        try:
            item = await container.create_item(body=body)
        except CosmosHttpResponseError as e:
            self._raise_on_conflict(e, document)
            raise
        return _strip_system_fields(item)

    async def update_by_id(self, doc_id: str, document: Document) -> Document | None:
        container = self._require_container()
        body = {**document, "id": doc_id, "kind": _PARTITION_VALUE}
        try:
            item = await container.replace_item(item=doc_id, body=body)
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as e:
            self._raise_on_conflict(e, document)
            raise
        return _strip_system_fields(item)

    async def delete_by_id(self, doc_id: str) -> bool:
        container = self._require_container()
        try:
            await container.delete_item(item=doc_id, partition_key=_PARTITION_VALUE)
        except CosmosResourceNotFoundError:
            return False
        return True

    async def check_connection(self) -> bool:
        if not self.container:
            return False
        try:
            query = "SELECT VALUE COUNT(1) FROM c"
            async for _ in self.container.query_items(query=query, partition_key=_PARTITION_VALUE):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False

    def _require_container(self) -> Any:
        if self.container is None:
            raise StoreUnavailableError("CosmosEmployeeStore is not connected")
        return self.container

    def _raise_on_conflict(self, error: CosmosHttpResponseError, document: Document) -> None:
        if error.status_code == 409:
            raise DuplicateKeyError(self.UNIQUE_FIELD, document.get(self.UNIQUE_FIELD)) from error

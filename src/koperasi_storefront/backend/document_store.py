"""Document store backed by DynamoDB.

Each collection is a DynamoDB table keyed by a string ``id`` partition key.
Records are plain dictionaries; typed entities are built from them in the
repository layer. Failed calls are logged with their cause and re-raised as
BackendReadError / BackendWriteError so callers can surface a generic notice.
"""

import logging
import uuid
from datetime import UTC, datetime
from functools import reduce
from typing import Any

from boto3.dynamodb.conditions import Attr, ConditionBase
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from koperasi_storefront.exceptions import BackendReadError, BackendWriteError, NotFoundError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def new_record_id() -> str:
    """Generate a unique record identifier."""
    return uuid.uuid4().hex[:20]


class DocumentStore:
    """CRUD access to the hosted document collections.

    Collection names map to DynamoDB table names through ``tables``; a name
    without a mapping is used as the table name directly.
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        tables: dict[str, str] | None = None,
    ) -> None:
        """Initialize the document store.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            tables: Mapping of collection name to table name
        """
        self.dynamodb = dynamodb_resource
        self.tables = tables or {}
        self._table_cache: dict[str, Table] = {}

    def _table(self, collection: str) -> Table:
        if collection not in self._table_cache:
            table_name = self.tables.get(collection, collection)
            self._table_cache[collection] = self.dynamodb.Table(table_name)
        return self._table_cache[collection]

    def create_record(
        self, collection: str, fields: dict[str, Any], record_id: str | None = None
    ) -> Record:
        """Create a record.

        Args:
            collection: Collection name
            fields: Record fields (without ``id``)
            record_id: Explicit identifier, generated when omitted

        Returns:
            The stored record including its ``id``

        Raises:
            BackendWriteError: If the record could not be written
        """
        record: Record = {"id": record_id or new_record_id(), **fields}
        record.setdefault("created_at", datetime.now(UTC).isoformat())

        try:
            self._table(collection).put_item(
                Item=record,
                ConditionExpression="attribute_not_exists(id)",
            )
            return record

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to create record in {collection}: {e}")
            raise BackendWriteError() from e

    def get_record(self, collection: str, record_id: str) -> Record | None:
        """Retrieve a record by id.

        Args:
            collection: Collection name
            record_id: Record identifier

        Returns:
            The record if found, None otherwise

        Raises:
            BackendReadError: If the lookup failed
        """
        try:
            response = self._table(collection).get_item(Key={"id": record_id})

            if "Item" not in response:
                return None

            return dict(response["Item"])

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to get record {record_id} from {collection}: {e}")
            raise BackendReadError() from e

    def update_record(self, collection: str, record_id: str, fields: dict[str, Any]) -> Record:
        """Update fields of an existing record.

        Args:
            collection: Collection name
            record_id: Record identifier
            fields: Fields to set; a value of None removes the attribute

        Returns:
            The record after the update

        Raises:
            NotFoundError: If no record has this id
            BackendWriteError: If the update failed
        """
        set_fields = {k: v for k, v in fields.items() if v is not None and k != "id"}
        remove_fields = [k for k, v in fields.items() if v is None and k != "id"]

        names = {f"#f{i}": name for i, name in enumerate([*set_fields, *remove_fields])}
        placeholders = {name: placeholder for placeholder, name in names.items()}

        clauses = []
        if set_fields:
            assignments = ", ".join(f"{placeholders[k]} = :v{i}" for i, k in enumerate(set_fields))
            clauses.append(f"SET {assignments}")
        if remove_fields:
            clauses.append("REMOVE " + ", ".join(placeholders[k] for k in remove_fields))

        if not clauses:
            record = self.get_record(collection, record_id)
            if record is None:
                raise NotFoundError(f"Record {record_id} not found in {collection}")
            return record

        kwargs: dict[str, Any] = {
            "Key": {"id": record_id},
            "UpdateExpression": " ".join(clauses),
            "ExpressionAttributeNames": names,
            "ConditionExpression": "attribute_exists(id)",
            "ReturnValues": "ALL_NEW",
        }
        if set_fields:
            kwargs["ExpressionAttributeValues"] = {
                f":v{i}": value for i, value in enumerate(set_fields.values())
            }

        try:
            response = self._table(collection).update_item(**kwargs)
            return dict(response.get("Attributes", {"id": record_id, **set_fields}))

        except (BotoCoreError, ClientError) as e:
            if isinstance(e, ClientError) and _error_code(e) == "ConditionalCheckFailedException":
                raise NotFoundError(f"Record {record_id} not found in {collection}") from e
            logger.error(f"Failed to update record {record_id} in {collection}: {e}")
            raise BackendWriteError() from e

    def delete_record(self, collection: str, record_id: str) -> None:
        """Delete a record.

        Args:
            collection: Collection name
            record_id: Record identifier

        Raises:
            BackendWriteError: If the delete failed
        """
        try:
            self._table(collection).delete_item(Key={"id": record_id})

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete record {record_id} from {collection}: {e}")
            raise BackendWriteError() from e

    def list_records(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        """List records matching equality filters.

        Args:
            collection: Collection name
            filters: Attribute name to required value
            order_by: Attribute to sort by
            descending: Sort direction
            limit: Maximum number of records to return after sorting

        Returns:
            list: Matching records (empty list if none found)

        Raises:
            BackendReadError: If the scan failed
        """
        scan_kwargs: dict[str, Any] = {}
        if filters:
            conditions: list[ConditionBase] = [Attr(k).eq(v) for k, v in filters.items()]
            scan_kwargs["FilterExpression"] = reduce(lambda a, b: a & b, conditions)

        records: list[Record] = []
        try:
            table = self._table(collection)
            while True:
                response = table.scan(**scan_kwargs)
                records.extend(dict(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list records from {collection}: {e}")
            raise BackendReadError() from e

        if order_by:
            # Records missing the attribute are grouped after the rest (before, when descending)
            records.sort(
                key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""),
                reverse=descending,
            )

        return records[:limit] if limit is not None else records


def _error_code(error: ClientError) -> str | None:
    code: str | None = error.response.get("Error", {}).get("Code")
    return code

"""DynamoDB backend implementing IStore."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

import boto3
from botocore.exceptions import ClientError

from approvalflow.core.exceptions import DuplicateRowError, StoreError
from approvalflow.models.schema import TABLE_KEYS


def _decode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    if isinstance(value, dict):
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    return {k: _decode(v) for k, v in item.items()}


def _encode(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


class DynamoDBStore:
    """Production IStore: one DynamoDB table per logical table, hash key only."""

    def __init__(self, table_prefix: str = "approvalflow", table_suffix: str = "",
                 region: str = "us-east-1", endpoint_url: str | None = None,
                 keys: Mapping[str, str] | None = None) -> None:
        self._table_prefix = table_prefix
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        self._keys = dict(keys if keys is not None else TABLE_KEYS)
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def table_name(self, table: str) -> str:
        return f"{self._table_prefix}-{table.replace('_', '-')}{self._table_suffix}"

    def _table(self, table: str):
        return self._ddb.Table(self.table_name(table))

    def _key(self, table: str, key: str) -> dict[str, str]:
        return {self._keys[table]: key}

    def key_column(self, table: str) -> str:
        try:
            desc = self._ddb.meta.client.describe_table(TableName=self.table_name(table))
        except ClientError as exc:
            raise StoreError(f"DynamoDB describe failed for {table!r}: {exc}") from exc
        for element in desc["Table"]["KeySchema"]:
            if element["KeyType"] == "HASH":
                return element["AttributeName"]
        raise StoreError(f"Table {table!r} has no hash key")

    def read_all(self, table: str) -> list[dict[str, Any]]:
        """Scan every item, following pagination."""
        tbl = self._table(table)
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"ConsistentRead": True}
        try:
            while True:
                resp = tbl.scan(**kwargs)
                items.extend(_decode_decimals(i) for i in resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            raise StoreError(f"DynamoDB scan failed for {table!r}: {exc}") from exc

    def read_row(self, table: str, key: str) -> dict[str, Any] | None:
        try:
            resp = self._table(table).get_item(Key=self._key(table, key), ConsistentRead=True)
        except ClientError as exc:
            raise StoreError(f"DynamoDB get failed for {table!r}/{key!r}: {exc}") from exc
        item = resp.get("Item")
        return _decode_decimals(item) if item else None

    def write_cell(self, table: str, key: str, column: str, value: Any) -> None:
        self.write_cells(table, key, {column: value})

    def write_cells(self, table: str, key: str, values: Mapping[str, Any]) -> None:
        """Update several attributes of an existing item in one UpdateItem call."""
        if not values:
            return
        names = {f"#c{i}": col for i, col in enumerate(values)}
        attr_values = {f":v{i}": _encode(val) for i, val in enumerate(values.values())}
        names["#k"] = self._keys[table]
        expression = "SET " + ", ".join(f"#c{i} = :v{i}" for i in range(len(values)))
        try:
            self._table(table).update_item(
                Key=self._key(table, key),
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(#k)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=attr_values,
            )
        except ClientError as exc:
            raise StoreError(f"DynamoDB update failed for {table!r}/{key!r}: {exc}") from exc

    def append_row(self, table: str, values: Mapping[str, Any]) -> None:
        key = str(values[self._keys[table]])
        try:
            self._table(table).put_item(
                Item=_encode(dict(values)),
                ConditionExpression="attribute_not_exists(#k)",
                ExpressionAttributeNames={"#k": self._keys[table]},
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise DuplicateRowError(table, key) from exc
            raise StoreError(f"DynamoDB put failed for {table!r}/{key!r}: {exc}") from exc

    def delete_row(self, table: str, key: str) -> None:
        try:
            self._table(table).delete_item(
                Key=self._key(table, key),
                ConditionExpression="attribute_exists(#k)",
                ExpressionAttributeNames={"#k": self._keys[table]},
            )
        except ClientError as exc:
            raise StoreError(f"DynamoDB delete failed for {table!r}/{key!r}: {exc}") from exc

"""DynamoDB implementation of the Key-Value Store."""

import json
from typing import Any, Dict, Iterable, Optional

import aioboto3
from boto3.dynamodb.conditions import Attr

from ..domain.interfaces.key_value_store import KeyValueStore

KEY_ATTRIBUTE = "storage_key"
VALUE_ATTRIBUTE = "value"


class DynamoDBKeyValueStore(KeyValueStore):
    """DynamoDB store for the reading session, preferences, history and audio cache.

    Each key is one item whose partition key is ``storage_key``; the value
    is kept as a JSON string so arbitrary nesting and floats round-trip.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB key-value store.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def get(self, key: str) -> Optional[Any]:
        """Read a value from DynamoDB.

        Args:
            key: The storage key.

        Returns:
            The stored value, or None if the item does not exist.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={KEY_ATTRIBUTE: key})

            if "Item" not in response:
                return None

            return self._item_to_value(response["Item"])

    async def set(self, key: str, value: Any) -> None:
        """Write a value to DynamoDB.

        Args:
            key: The storage key.
            value: A JSON-compatible value.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._value_to_item(key, value))

    async def remove(self, keys: Iterable[str]) -> None:
        """Delete items in a batch. Missing keys are ignored.

        Args:
            keys: The storage keys to remove.
        """
        keys = list(dict.fromkeys(keys))
        if not keys:
            return

        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            async with table.batch_writer() as batch:
                for key in keys:
                    await batch.delete_item(Key={KEY_ATTRIBUTE: key})

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        """Enumerate keys starting with ``prefix``, following scan pagination.

        Args:
            prefix: The key prefix.

        Returns:
            list[str]: The matching keys.
        """
        keys: list[str] = []
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            scan_kwargs: Dict[str, Any] = {
                "FilterExpression": Attr(KEY_ATTRIBUTE).begins_with(prefix),
                "ProjectionExpression": KEY_ATTRIBUTE,
            }
            while True:
                response = await table.scan(**scan_kwargs)
                keys.extend(item[KEY_ATTRIBUTE] for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        return keys

    def _value_to_item(self, key: str, value: Any) -> Dict[str, Any]:
        return {
            KEY_ATTRIBUTE: key,
            VALUE_ATTRIBUTE: json.dumps(value),
        }

    def _item_to_value(self, item: Dict[str, Any]) -> Any:
        return json.loads(item[VALUE_ATTRIBUTE])

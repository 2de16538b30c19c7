"""Key-value store interface."""

from typing import Any, Iterable, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol defining the durable storage used by the persistence gateway.

    Values are JSON-compatible. Implementations can be backed by memory,
    DynamoDB, etc.
    """

    async def get(self, key: str) -> Optional[Any]:
        """Read a value.

        Args:
            key: The storage key.

        Returns:
            The stored value, or None if the key is absent.
        """
        ...

    async def set(self, key: str, value: Any) -> None:
        """Write a value, replacing any previous one.

        Args:
            key: The storage key.
            value: A JSON-compatible value.
        """
        ...

    async def remove(self, keys: Iterable[str]) -> None:
        """Remove keys. Missing keys are ignored.

        Args:
            keys: The storage keys to remove.
        """
        ...

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        """Enumerate every stored key starting with ``prefix``.

        Args:
            prefix: The key prefix.

        Returns:
            list[str]: The matching keys.
        """
        ...

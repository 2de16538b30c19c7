"""Local in-memory implementation of the Key-Value Store."""

import copy
from typing import Any, Dict, Iterable, Optional

from ..domain.interfaces.key_value_store import KeyValueStore


class LocalKeyValueStore(KeyValueStore):
    """Local in-memory implementation of the Key-Value Store.

    Stores values in a dictionary for testing and development purposes.
    Values are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Optional[Any]:
        """Read a value from the in-memory dictionary.

        Args:
            key: The storage key.

        Returns:
            The stored value, or None if the key is absent.
        """
        if key not in self._values:
            return None
        return copy.deepcopy(self._values[key])

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    async def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._values.pop(key, None)

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self._values if key.startswith(prefix)]

    def clear(self) -> None:
        """Clear all values from the dictionary."""
        self._values.clear()

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of every stored value.

        Returns:
            Dict[str, Any]: Dictionary of all values.
        """
        return copy.deepcopy(self._values)

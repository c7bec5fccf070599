"""Protocol for the shared key/value store (SQL via SQLAlchemy, or a plain dict within one process)"""

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """
    Shared, eventually-consistent storage of strings.

    NOTE there is no compare-and-set: concurrent writers to the same key simply overwrite each other.
    """

    def get(self, key: str) -> Optional[str]:
        """Value stored under key, if record exists."""
        ...

    def set(self, key: str, value: str) -> None:
        """Create or overwrite the value stored under key."""
        ...


class InMemoryStore:
    """KeyValueStore backed by a dictionary. Shared by every client that holds a reference to it."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

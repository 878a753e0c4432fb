"""Abstract base class for key-value stores."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract interface for a string key-value slot store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Read the value stored under a key.

        Args:
            key: Slot identifier

        Returns:
            Stored value, or None if the slot is empty
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value to a slot, replacing any previous value.

        Args:
            key: Slot identifier
            value: Serialized value
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Clear a slot. Deleting an empty slot is a no-op."""
        pass

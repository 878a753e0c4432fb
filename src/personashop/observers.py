"""Ordered callback registry used for change notification."""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class SubscriberList(Generic[T]):
    """Callbacks notified synchronously in registration order."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register a callback.

        Args:
            callback: Called with each published value

        Returns:
            Handle that deregisters this registration (safe to call twice)
        """
        # Wrap so the same function can be registered twice and removed independently
        entry: Callable[[T], None] = lambda value: callback(value)
        self._callbacks.append(entry)

        def unsubscribe() -> None:
            if entry in self._callbacks:
                self._callbacks.remove(entry)

        return unsubscribe

    def notify(self, value: T) -> None:
        """Deliver a value to every registered callback.

        A callback that raises is logged and skipped; the rest still run.
        """
        for callback in list(self._callbacks):
            if callback not in self._callbacks:
                # Unsubscribed by an earlier callback during this delivery
                continue
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber callback failed")

    def clear(self) -> None:
        """Drop all callbacks."""
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)

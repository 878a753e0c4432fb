"""Behavior store: accumulates interaction events into a persisted profile."""

import json
import logging
import time
from dataclasses import replace
from typing import Callable

from personashop.behavior.models import (
    BehaviorEvent,
    BehaviorProfile,
    DeviceClass,
    EventKind,
    clamp_scroll_depth,
)
from personashop.observers import SubscriberList, Unsubscribe
from personashop.storage import InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_BEHAVIOR_KEY = "user_behavior_data"
DEFAULT_SESSION_KEY = "session_id"


class BehaviorStore:
    """Mutable owner of a visitor's behavior profile.

    Every recorded event replaces the current (frozen) profile with an updated
    copy, writes it to durable storage and notifies subscribers. Storage faults
    are logged and never raised.
    """

    def __init__(
        self,
        storage: KeyValueStore | None = None,
        session_storage: KeyValueStore | None = None,
        behavior_key: str = DEFAULT_BEHAVIOR_KEY,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        """Initialize behavior store and restore any persisted profile.

        Args:
            storage: Durable key-value store (in-memory if None)
            session_storage: Transient per-session store (in-memory if None)
            behavior_key: Slot holding the serialized profile
            session_key: Slot holding the session marker
        """
        self.storage = storage if storage is not None else InMemoryKeyValueStore()
        self.session_storage = (
            session_storage if session_storage is not None else InMemoryKeyValueStore()
        )
        self.behavior_key = behavior_key
        self.session_key = session_key
        self._subscribers: SubscriberList[BehaviorProfile] = SubscriberList()

        self._profile = self._load()
        if self._start_session():
            self._profile = replace(self._profile, session_count=self._profile.session_count + 1)
            self._save()

    def _load(self) -> BehaviorProfile:
        """Restore the persisted profile, falling back to the zero state."""
        try:
            raw = self.storage.get(self.behavior_key)
            if raw is None:
                return BehaviorProfile()
            return BehaviorProfile.from_dict(json.loads(raw))
        except (OSError, ValueError, TypeError, KeyError, OverflowError, RecursionError) as e:
            logger.warning("Discarding unreadable behavior data: %s", e)
            return BehaviorProfile()

    def _start_session(self) -> bool:
        """Write the session marker if absent.

        Returns:
            True if this call crossed a session boundary
        """
        try:
            if self.session_storage.get(self.session_key) is not None:
                return False
            self.session_storage.set(self.session_key, str(int(time.time() * 1000)))
        except (OSError, ValueError) as e:
            logger.warning("Session marker unavailable: %s", e)
        return True

    def _save(self) -> None:
        try:
            self.storage.set(self.behavior_key, json.dumps(self._profile.to_dict()))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Failed to save behavior data: %s", e)

    def _apply(self, event: BehaviorEvent) -> BehaviorProfile:
        """Return the profile with one event folded in."""
        profile = self._profile
        kind = event.kind

        if kind is EventKind.CLICKED:
            return replace(profile, click_count=profile.click_count + 1)
        if kind is EventKind.CART_TOUCHED:
            return replace(profile, cart_interactions=profile.cart_interactions + 1)
        if kind is EventKind.REVIEW_READ:
            return replace(profile, review_reads=profile.review_reads + 1)
        if kind is EventKind.PRICE_FILTER_USED:
            return replace(profile, price_filter_usage=profile.price_filter_usage + 1)
        if kind is EventKind.SCROLLED:
            depth = clamp_scroll_depth(event.value)
            return replace(profile, scroll_depth_pct=max(profile.scroll_depth_pct, depth))
        if kind is EventKind.TIME_ON_PAGE:
            return replace(profile, time_on_page_sec=max(profile.time_on_page_sec, event.value))
        if kind is EventKind.PRODUCT_VIEWED:
            if event.value in profile.product_views:
                return profile
            return replace(profile, product_views=profile.product_views + (event.value,))
        if kind is EventKind.SEARCHED:
            # Empty queries carry no signal
            if not event.value or event.value in profile.search_queries:
                return profile
            return replace(profile, search_queries=profile.search_queries + (event.value,))
        if kind is EventKind.CATEGORY_INTERACTED:
            counts = dict(profile.category_counts)
            counts[event.value] = counts.get(event.value, 0) + 1
            return replace(profile, category_counts=counts)
        if kind is EventKind.DEVICE_DETECTED:
            return replace(profile, device_class=DeviceClass(event.value))

        raise ValueError(f"Unhandled event kind: {kind}")

    def record(self, event: BehaviorEvent) -> BehaviorProfile:
        """Fold an event into the profile, persist it and notify subscribers.

        Args:
            event: Interaction event

        Returns:
            The updated profile snapshot
        """
        self._profile = self._apply(event)
        self._save()
        self._subscribers.notify(self._profile)
        return self._profile

    def snapshot(self) -> BehaviorProfile:
        """Return the current profile (immutable)."""
        return self._profile

    def reset(self) -> BehaviorProfile:
        """Restore the zero profile and clear persisted data."""
        self._profile = BehaviorProfile()
        try:
            self.storage.delete(self.behavior_key)
        except (OSError, ValueError) as e:
            logger.warning("Failed to clear behavior data: %s", e)
        self._subscribers.notify(self._profile)
        return self._profile

    def subscribe(self, callback: Callable[[BehaviorProfile], None]) -> Unsubscribe:
        """Register a behavior observer.

        Returns:
            Handle that deregisters the observer
        """
        return self._subscribers.subscribe(callback)

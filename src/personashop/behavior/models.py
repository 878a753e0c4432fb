"""Visitor behavior profile and interaction events."""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class DeviceClass(str, Enum):
    """Visitor device class."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


# Viewport breakpoints (px)
MOBILE_MAX_WIDTH = 768
TABLET_MAX_WIDTH = 1024


def detect_device_class(viewport_width: float) -> DeviceClass:
    """Classify a device from its viewport width.

    Args:
        viewport_width: Viewport width in CSS pixels

    Returns:
        Device class for the width
    """
    if viewport_width < MOBILE_MAX_WIDTH:
        return DeviceClass.MOBILE
    if viewport_width < TABLET_MAX_WIDTH:
        return DeviceClass.TABLET
    return DeviceClass.DESKTOP


def _non_negative_int(value: Any) -> int:
    return max(int(value), 0)


def _non_negative_float(value: Any) -> float:
    number = float(value)
    return number if number > 0 else 0.0


def clamp_scroll_depth(depth_pct: float) -> float:
    """Clamp a scroll depth percentage to [0, 100]. NaN maps to 0."""
    depth = float(depth_pct)
    if math.isnan(depth):
        return 0.0
    return min(max(depth, 0.0), 100.0)


@dataclass(frozen=True)
class BehaviorProfile:
    """Immutable snapshot of a visitor's accumulated interactions."""

    click_count: int = 0
    scroll_depth_pct: float = 0.0
    time_on_page_sec: float = 0.0
    product_views: tuple[str, ...] = ()
    cart_interactions: int = 0
    search_queries: tuple[str, ...] = ()
    price_filter_usage: int = 0
    review_reads: int = 0
    category_counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    device_class: DeviceClass = DeviceClass.DESKTOP
    session_count: int = 0

    def __post_init__(self) -> None:
        # Freeze containers so snapshots cannot be mutated by collaborators
        object.__setattr__(self, "product_views", tuple(self.product_views))
        object.__setattr__(self, "search_queries", tuple(self.search_queries))
        object.__setattr__(
            self, "category_counts", MappingProxyType(dict(self.category_counts))
        )
        object.__setattr__(self, "device_class", DeviceClass(self.device_class))
        object.__setattr__(self, "scroll_depth_pct", clamp_scroll_depth(self.scroll_depth_pct))

    @property
    def distinct_categories(self) -> int:
        """Number of categories interacted with at least once."""
        return len(self.category_counts)

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to the persisted JSON layout."""
        return {
            "clickCount": self.click_count,
            "scrollDepth": self.scroll_depth_pct,
            "timeOnPage": self.time_on_page_sec,
            "productViews": list(self.product_views),
            "cartInteractions": self.cart_interactions,
            "searchQueries": list(self.search_queries),
            "priceFilterUsage": self.price_filter_usage,
            "reviewReads": self.review_reads,
            "categoryPreferences": dict(self.category_counts),
            "deviceType": self.device_class.value,
            "sessionCount": self.session_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BehaviorProfile":
        """Create profile from its persisted JSON layout.

        Missing keys take their zero value. Negative counters are clamped to
        zero and duplicate list entries are dropped.

        Raises:
            TypeError: If ``data`` or one of its values has the wrong shape
            ValueError: If a value cannot be converted
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        categories = data.get("categoryPreferences") or {}
        if not isinstance(categories, Mapping):
            raise TypeError("categoryPreferences must be an object")

        return cls(
            click_count=_non_negative_int(data.get("clickCount", 0)),
            scroll_depth_pct=float(data.get("scrollDepth", 0.0)),
            time_on_page_sec=_non_negative_float(data.get("timeOnPage", 0.0)),
            product_views=tuple(dict.fromkeys(str(p) for p in data.get("productViews") or [])),
            cart_interactions=_non_negative_int(data.get("cartInteractions", 0)),
            search_queries=tuple(dict.fromkeys(str(q) for q in data.get("searchQueries") or [])),
            price_filter_usage=_non_negative_int(data.get("priceFilterUsage", 0)),
            review_reads=_non_negative_int(data.get("reviewReads", 0)),
            category_counts={
                str(category): _non_negative_int(count) for category, count in categories.items()
            },
            device_class=DeviceClass(data.get("deviceType", DeviceClass.DESKTOP.value)),
            session_count=_non_negative_int(data.get("sessionCount", 0)),
        )


class EventKind(str, Enum):
    """Semantic interaction events fed in by the presentation layer."""

    PRODUCT_VIEWED = "product_viewed"
    CATEGORY_INTERACTED = "category_interacted"
    SEARCHED = "searched"
    CART_TOUCHED = "cart_touched"
    REVIEW_READ = "review_read"
    PRICE_FILTER_USED = "price_filter_used"
    SCROLLED = "scrolled"
    CLICKED = "clicked"
    TIME_ON_PAGE = "time_on_page"
    DEVICE_DETECTED = "device_detected"


_STRING_EVENTS = {EventKind.PRODUCT_VIEWED, EventKind.CATEGORY_INTERACTED, EventKind.SEARCHED}
_NUMERIC_EVENTS = {EventKind.SCROLLED, EventKind.TIME_ON_PAGE}


@dataclass(frozen=True)
class BehaviorEvent:
    """A normalized interaction event.

    ``value`` carries the product id, category id, search query, scroll depth,
    elapsed seconds or device class depending on ``kind``; counter events
    carry no value.
    """

    kind: EventKind
    value: str | float | DeviceClass | None = None

    def __post_init__(self) -> None:
        kind = EventKind(self.kind)
        object.__setattr__(self, "kind", kind)

        if kind in _STRING_EVENTS:
            if not isinstance(self.value, str):
                raise ValueError(f"{kind.value} requires a string value")
        elif kind in _NUMERIC_EVENTS:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise ValueError(f"{kind.value} requires a numeric value")
            object.__setattr__(self, "value", float(self.value))
        elif kind is EventKind.DEVICE_DETECTED:
            object.__setattr__(self, "value", DeviceClass(self.value))
        elif self.value is not None:
            raise ValueError(f"{kind.value} does not take a value")

    @classmethod
    def product_viewed(cls, product_id: str) -> "BehaviorEvent":
        return cls(EventKind.PRODUCT_VIEWED, product_id)

    @classmethod
    def category_interacted(cls, category_id: str) -> "BehaviorEvent":
        return cls(EventKind.CATEGORY_INTERACTED, category_id)

    @classmethod
    def searched(cls, query: str) -> "BehaviorEvent":
        return cls(EventKind.SEARCHED, query)

    @classmethod
    def cart_touched(cls) -> "BehaviorEvent":
        return cls(EventKind.CART_TOUCHED)

    @classmethod
    def review_read(cls) -> "BehaviorEvent":
        return cls(EventKind.REVIEW_READ)

    @classmethod
    def price_filter_used(cls) -> "BehaviorEvent":
        return cls(EventKind.PRICE_FILTER_USED)

    @classmethod
    def scrolled(cls, depth_pct: float) -> "BehaviorEvent":
        return cls(EventKind.SCROLLED, depth_pct)

    @classmethod
    def clicked(cls) -> "BehaviorEvent":
        return cls(EventKind.CLICKED)

    @classmethod
    def time_on_page(cls, seconds: float) -> "BehaviorEvent":
        return cls(EventKind.TIME_ON_PAGE, seconds)

    @classmethod
    def device_detected(cls, device_class: DeviceClass | str) -> "BehaviorEvent":
        return cls(EventKind.DEVICE_DETECTED, DeviceClass(device_class))

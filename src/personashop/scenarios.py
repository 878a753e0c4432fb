"""Scripted visitor sessions for demos and smoke tests."""

from personashop.behavior import BehaviorEvent


def _repeat(event: BehaviorEvent, times: int) -> list[BehaviorEvent]:
    return [event] * times


def _products(count: int) -> list[BehaviorEvent]:
    return [BehaviorEvent.product_viewed(f"P{i}") for i in range(1, count + 1)]


def _searches(*queries: str) -> list[BehaviorEvent]:
    return [BehaviorEvent.searched(query) for query in queries]


def _categories(*categories: str) -> list[BehaviorEvent]:
    return [BehaviorEvent.category_interacted(category) for category in categories]


SCENARIOS: dict[str, list[BehaviorEvent]] = {
    "bargain_hunter": [
        *_repeat(BehaviorEvent.price_filter_used(), 8),
        BehaviorEvent.scrolled(90),
        BehaviorEvent.searched("shoes"),
    ],
    "impulse_buyer": [
        *_repeat(BehaviorEvent.clicked(), 85),
        *_products(14),
        *_repeat(BehaviorEvent.cart_touched(), 9),
        BehaviorEvent.scrolled(15),
    ],
    "researcher": [
        *_repeat(BehaviorEvent.clicked(), 55),
        BehaviorEvent.scrolled(95),
        BehaviorEvent.time_on_page(280),
        *_products(10),
        *_searches("laptop", "laptop 16gb", "laptop reviews", "ultrabook", "battery life",
                   "oled laptop", "laptop weight", "laptop warranty"),
        *_repeat(BehaviorEvent.price_filter_used(), 6),
        *_repeat(BehaviorEvent.review_read(), 9),
        *_categories("electronics", "computers", "accessories"),
    ],
    "loyal_customer": [
        *_repeat(BehaviorEvent.clicked(), 65),
        BehaviorEvent.scrolled(65),
        BehaviorEvent.time_on_page(180),
        *_products(16),
        *_repeat(BehaviorEvent.cart_touched(), 7),
        *_searches("socks", "jeans", "jacket", "scarf"),
        *_repeat(BehaviorEvent.price_filter_used(), 2),
        *_repeat(BehaviorEvent.review_read(), 5),
        *_categories("women", "men", "kids", "home", "sport"),
    ],
    "new_visitor": [
        *_repeat(BehaviorEvent.clicked(), 5),
        BehaviorEvent.scrolled(20),
    ],
}

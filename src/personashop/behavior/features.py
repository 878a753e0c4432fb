"""Behavior profile feature normalization.

Maps a profile onto the fixed 10-dimensional [0, 1] vector the persona
classifier consumes.
"""

import numpy as np
from numpy.typing import NDArray

from personashop.behavior.models import BehaviorProfile, DeviceClass

FEATURE_NAMES: tuple[str, ...] = (
    "clicks",
    "scroll_depth",
    "time_on_page",
    "product_views",
    "cart_interactions",
    "search_queries",
    "price_filter_usage",
    "review_reads",
    "categories",
    "device",
)

NUM_FEATURES = len(FEATURE_NAMES)

# Value at which each count-like feature saturates to 1.0
FEATURE_CEILINGS: dict[str, float] = {
    "clicks": 100.0,
    "scroll_depth": 100.0,
    "time_on_page": 300.0,  # 5 minutes
    "product_views": 20.0,
    "cart_interactions": 10.0,
    "search_queries": 10.0,
    "price_filter_usage": 10.0,
    "review_reads": 10.0,
    "categories": 5.0,
}

DEVICE_WEIGHTS: dict[DeviceClass, float] = {
    DeviceClass.MOBILE: 0.3,
    DeviceClass.TABLET: 0.6,
    DeviceClass.DESKTOP: 1.0,
}


def normalize(profile: BehaviorProfile) -> NDArray[np.float32]:
    """Normalize a behavior profile into classifier features.

    Args:
        profile: Behavior snapshot

    Returns:
        float32 vector of length 10, every component within [0, 1]
    """
    raw = {
        "clicks": profile.click_count,
        "scroll_depth": profile.scroll_depth_pct,
        "time_on_page": profile.time_on_page_sec,
        "product_views": len(profile.product_views),
        "cart_interactions": profile.cart_interactions,
        "search_queries": len(profile.search_queries),
        "price_filter_usage": profile.price_filter_usage,
        "review_reads": profile.review_reads,
        "categories": profile.distinct_categories,
    }

    features = np.array(
        [raw[name] / FEATURE_CEILINGS[name] for name in FEATURE_NAMES[:-1]]
        + [DEVICE_WEIGHTS[profile.device_class]],
        dtype=np.float32,
    )
    # clip passes NaN through unchanged
    features = np.nan_to_num(features, nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(features, 0.0, 1.0)

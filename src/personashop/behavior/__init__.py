"""Visitor behavior tracking and feature normalization."""

from personashop.behavior.features import FEATURE_NAMES, NUM_FEATURES, normalize
from personashop.behavior.models import (
    BehaviorEvent,
    BehaviorProfile,
    DeviceClass,
    EventKind,
    detect_device_class,
)
from personashop.behavior.store import BehaviorStore

__all__ = [
    "BehaviorEvent",
    "BehaviorProfile",
    "BehaviorStore",
    "DeviceClass",
    "EventKind",
    "FEATURE_NAMES",
    "NUM_FEATURES",
    "detect_device_class",
    "normalize",
]

"""Presentation preferences: persona defaults and feedback adjustment."""

from personashop.preferences.feedback import (
    COLOR_CYCLE,
    LAYOUT_CYCLE,
    apply_adjustments,
    apply_feedback,
    fold_feedback,
)
from personashop.preferences.mapper import PERSONA_PREFERENCES, map_persona
from personashop.preferences.models import (
    DEFAULT_PREFERENCES,
    AnimationLevel,
    ColorScheme,
    FeedbackEvent,
    FeedbackKind,
    FeedbackTarget,
    FontSize,
    LayoutStyle,
    ManualOverride,
    PreferenceBundle,
)

__all__ = [
    "AnimationLevel",
    "COLOR_CYCLE",
    "ColorScheme",
    "DEFAULT_PREFERENCES",
    "FeedbackEvent",
    "FeedbackKind",
    "FeedbackTarget",
    "FontSize",
    "LAYOUT_CYCLE",
    "LayoutStyle",
    "ManualOverride",
    "PERSONA_PREFERENCES",
    "PreferenceBundle",
    "apply_adjustments",
    "apply_feedback",
    "fold_feedback",
    "map_persona",
]

"""Feedback-driven preference adjustment.

A dislike steps the targeted option to the next value of a fixed cycle; likes
and suggestions leave the bundle unchanged.
"""

from dataclasses import replace
from typing import Iterable, Sequence, TypeVar

from personashop.preferences.models import (
    ColorScheme,
    FeedbackEvent,
    FeedbackKind,
    FeedbackTarget,
    LayoutStyle,
    ManualOverride,
    PreferenceBundle,
)

LAYOUT_CYCLE: tuple[LayoutStyle, ...] = (
    LayoutStyle.GRID,
    LayoutStyle.LIST,
    LayoutStyle.COMPACT,
    LayoutStyle.SPACIOUS,
)

COLOR_CYCLE: tuple[ColorScheme, ...] = (
    ColorScheme.DEFAULT,
    ColorScheme.VIBRANT,
    ColorScheme.MINIMAL,
    ColorScheme.WARM,
    ColorScheme.COOL,
)

T = TypeVar("T")

Adjustment = FeedbackEvent | ManualOverride


def next_in_cycle(cycle: Sequence[T], current: T) -> T:
    """Return the value after ``current`` in ``cycle``, wrapping at the end."""
    return cycle[(cycle.index(current) + 1) % len(cycle)]


def apply_feedback(bundle: PreferenceBundle, feedback: FeedbackEvent) -> PreferenceBundle:
    """Apply one feedback event to a bundle.

    Args:
        bundle: Current preferences
        feedback: Feedback to apply

    Returns:
        Adjusted preferences (the same bundle when nothing changes)
    """
    if feedback.kind is not FeedbackKind.DISLIKE:
        return bundle

    if feedback.target is FeedbackTarget.LAYOUT:
        return replace(bundle, layout_style=next_in_cycle(LAYOUT_CYCLE, bundle.layout_style))
    if feedback.target is FeedbackTarget.COLORS:
        return replace(bundle, color_scheme=next_in_cycle(COLOR_CYCLE, bundle.color_scheme))
    if feedback.target is FeedbackTarget.RECOMMENDATIONS:
        return replace(bundle, show_recommendations=not bundle.show_recommendations)

    # OVERALL has no per-field meaning
    return bundle


def fold_feedback(bundle: PreferenceBundle, events: Iterable[FeedbackEvent]) -> PreferenceBundle:
    """Apply feedback events left to right."""
    for event in events:
        bundle = apply_feedback(bundle, event)
    return bundle


def apply_adjustments(
    bundle: PreferenceBundle, adjustments: Iterable[Adjustment]
) -> PreferenceBundle:
    """Replay an ordered history of feedback and manual overrides onto a bundle."""
    for adjustment in adjustments:
        if isinstance(adjustment, ManualOverride):
            bundle = bundle.with_field(adjustment.field_name, adjustment.value)
        else:
            bundle = apply_feedback(bundle, adjustment)
    return bundle

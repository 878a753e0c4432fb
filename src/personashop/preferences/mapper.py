"""Persona to default preference mapping."""

from types import MappingProxyType
from typing import Mapping

from personashop.personas.models import PersonaLabel
from personashop.preferences.models import (
    DEFAULT_PREFERENCES,
    AnimationLevel,
    ColorScheme,
    FontSize,
    LayoutStyle,
    PreferenceBundle,
)

PERSONA_PREFERENCES: Mapping[PersonaLabel, PreferenceBundle] = MappingProxyType(
    {
        PersonaLabel.BARGAIN_HUNTER: PreferenceBundle(
            color_scheme=ColorScheme.WARM,  # warm colors highlight deals
            layout_style=LayoutStyle.COMPACT,  # more items at once
            show_reviews=False,
            show_price_comparison=True,
            show_deals=True,
            show_recommendations=True,  # cheaper alternatives
            font_size=FontSize.MEDIUM,
            animation_level=AnimationLevel.SUBTLE,
        ),
        PersonaLabel.IMPULSE_BUYER: PreferenceBundle(
            color_scheme=ColorScheme.VIBRANT,
            layout_style=LayoutStyle.SPACIOUS,  # large images, clear calls to action
            show_reviews=False,
            show_price_comparison=False,  # keep the path to purchase short
            show_deals=True,
            show_recommendations=True,
            font_size=FontSize.LARGE,
            animation_level=AnimationLevel.FULL,
        ),
        PersonaLabel.RESEARCHER: PreferenceBundle(
            color_scheme=ColorScheme.MINIMAL,
            layout_style=LayoutStyle.LIST,  # room for details
            show_reviews=True,
            show_price_comparison=True,
            show_deals=False,
            show_recommendations=True,  # similar products to compare
            font_size=FontSize.MEDIUM,
            animation_level=AnimationLevel.NONE,
        ),
        PersonaLabel.LOYAL_CUSTOMER: PreferenceBundle(
            color_scheme=ColorScheme.COOL,
            layout_style=LayoutStyle.GRID,
            show_reviews=True,
            show_price_comparison=False,
            show_deals=True,  # reward loyalty
            show_recommendations=True,
            font_size=FontSize.MEDIUM,
            animation_level=AnimationLevel.SUBTLE,
        ),
        PersonaLabel.NEW_VISITOR: PreferenceBundle(
            color_scheme=ColorScheme.DEFAULT,
            layout_style=LayoutStyle.GRID,
            show_reviews=True,  # build trust
            show_price_comparison=True,
            show_deals=True,
            show_recommendations=False,  # don't overwhelm
            font_size=FontSize.MEDIUM,
            animation_level=AnimationLevel.SUBTLE,
        ),
    }
)


def map_persona(label: PersonaLabel | str) -> PreferenceBundle:
    """Return the default preference bundle for a persona.

    Args:
        label: Persona label (enum member or its string value)

    Returns:
        Preference bundle for the persona; unknown labels get DEFAULT_PREFERENCES
    """
    try:
        return PERSONA_PREFERENCES[PersonaLabel(label)]
    except ValueError:
        return DEFAULT_PREFERENCES

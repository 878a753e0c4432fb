"""Presentation preference bundle and user feedback events."""

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ColorScheme(str, Enum):
    DEFAULT = "default"
    VIBRANT = "vibrant"
    MINIMAL = "minimal"
    WARM = "warm"
    COOL = "cool"


class LayoutStyle(str, Enum):
    GRID = "grid"
    LIST = "list"
    COMPACT = "compact"
    SPACIOUS = "spacious"


class FontSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class AnimationLevel(str, Enum):
    NONE = "none"
    SUBTLE = "subtle"
    FULL = "full"


_ENUM_FIELDS: dict[str, type[Enum]] = {
    "color_scheme": ColorScheme,
    "layout_style": LayoutStyle,
    "font_size": FontSize,
    "animation_level": AnimationLevel,
}


@dataclass(frozen=True)
class PreferenceBundle:
    """Presentation toggles consumed by the storefront UI."""

    color_scheme: ColorScheme
    layout_style: LayoutStyle
    show_reviews: bool
    show_price_comparison: bool
    show_deals: bool
    show_recommendations: bool
    font_size: FontSize
    animation_level: AnimationLevel

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Names of all preference fields, in declaration order."""
        return tuple(f.name for f in fields(cls))

    def with_field(self, name: str, value: Any) -> "PreferenceBundle":
        """Return a copy with one field replaced.

        Enum fields accept either the enum member or its string value; flag
        fields accept only booleans.

        Raises:
            ValueError: If the field is unknown or the value is not allowed
        """
        if name not in self.field_names():
            raise ValueError(f"Unknown preference field: {name!r}")

        if name in _ENUM_FIELDS:
            value = _ENUM_FIELDS[name](value)
        elif not isinstance(value, bool):
            raise ValueError(f"{name} expects a boolean, got {value!r}")

        return replace(self, **{name: value})

    def to_dict(self) -> dict[str, Any]:
        """Convert bundle to a JSON-friendly dict."""
        return {
            name: value.value if isinstance(value, Enum) else value
            for name, value in asdict(self).items()
        }


DEFAULT_PREFERENCES = PreferenceBundle(
    color_scheme=ColorScheme.DEFAULT,
    layout_style=LayoutStyle.GRID,
    show_reviews=True,
    show_price_comparison=True,
    show_deals=True,
    show_recommendations=True,
    font_size=FontSize.MEDIUM,
    animation_level=AnimationLevel.SUBTLE,
)


class FeedbackKind(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    SUGGESTION = "suggestion"


class FeedbackTarget(str, Enum):
    LAYOUT = "layout"
    COLORS = "colors"
    RECOMMENDATIONS = "recommendations"
    OVERALL = "overall"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FeedbackEvent:
    """Explicit user feedback on one aspect of the presentation."""

    kind: FeedbackKind
    target: FeedbackTarget
    message: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", FeedbackKind(self.kind))
        object.__setattr__(self, "target", FeedbackTarget(self.target))

    @classmethod
    def like(cls, target: FeedbackTarget | str, message: str | None = None) -> "FeedbackEvent":
        return cls(FeedbackKind.LIKE, FeedbackTarget(target), message)

    @classmethod
    def dislike(cls, target: FeedbackTarget | str, message: str | None = None) -> "FeedbackEvent":
        return cls(FeedbackKind.DISLIKE, FeedbackTarget(target), message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target": self.target.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ManualOverride:
    """An explicit user choice for one preference field."""

    field_name: str
    value: Any
    timestamp: datetime = field(default_factory=_utcnow)

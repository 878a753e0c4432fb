"""Persona labels, score distributions and display metadata."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class PersonaLabel(str, Enum):
    """Shopper persona. Declaration order is the tie-break order."""

    BARGAIN_HUNTER = "bargain_hunter"  # Looks for deals, compares prices
    IMPULSE_BUYER = "impulse_buyer"  # Quick decisions, responsive to promotions
    RESEARCHER = "researcher"  # Reads details and reviews
    LOYAL_CUSTOMER = "loyal_customer"  # Regular visitor, consistent patterns
    NEW_VISITOR = "new_visitor"  # First-time or infrequent visitor


PERSONA_ORDER: tuple[PersonaLabel, ...] = tuple(PersonaLabel)

PersonaScores = Mapping[PersonaLabel, float]

UNIFORM_SCORES: PersonaScores = MappingProxyType(
    {label: 1.0 / len(PERSONA_ORDER) for label in PERSONA_ORDER}
)

DEFAULT_PERSONA = PersonaLabel.NEW_VISITOR


def scores_to_dict(scores: PersonaScores) -> dict[str, float]:
    """Convert scores to a JSON-friendly dict keyed by label value."""
    return {label.value: float(scores[label]) for label in PERSONA_ORDER}


@dataclass(frozen=True)
class PersonaInfo:
    """Display metadata for a persona."""

    label: str
    description: str
    icon: str


PERSONA_INFO: Mapping[PersonaLabel, PersonaInfo] = MappingProxyType(
    {
        PersonaLabel.BARGAIN_HUNTER: PersonaInfo(
            label="Bargain Hunter",
            description="You love finding the best deals and comparing prices!",
            icon="💰",
        ),
        PersonaLabel.IMPULSE_BUYER: PersonaInfo(
            label="Impulse Buyer",
            description="Quick decisions and exciting finds are your style!",
            icon="⚡",
        ),
        PersonaLabel.RESEARCHER: PersonaInfo(
            label="Researcher",
            description="You value detailed information and reviews!",
            icon="🔍",
        ),
        PersonaLabel.LOYAL_CUSTOMER: PersonaInfo(
            label="Loyal Customer",
            description="Welcome back! We know what you like!",
            icon="❤️",
        ),
        PersonaLabel.NEW_VISITOR: PersonaInfo(
            label="New Visitor",
            description="Welcome! Explore our amazing products!",
            icon="👋",
        ),
    }
)

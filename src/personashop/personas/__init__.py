"""Shopper persona labels and classification."""

from personashop.personas.classifier import (
    ClassifierState,
    PersonaClassifier,
    coerce_distribution,
    top_persona,
)
from personashop.personas.models import (
    DEFAULT_PERSONA,
    PERSONA_INFO,
    PERSONA_ORDER,
    UNIFORM_SCORES,
    PersonaInfo,
    PersonaLabel,
    PersonaScores,
)

__all__ = [
    "ClassifierState",
    "DEFAULT_PERSONA",
    "PERSONA_INFO",
    "PERSONA_ORDER",
    "PersonaClassifier",
    "PersonaInfo",
    "PersonaLabel",
    "PersonaScores",
    "UNIFORM_SCORES",
    "coerce_distribution",
    "top_persona",
]

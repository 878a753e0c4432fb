"""Personalization engine orchestration."""

from personashop.engine.orchestrator import PersonalizationEngine, PersonalizationState

__all__ = ["PersonalizationEngine", "PersonalizationState"]

"""Shared fixtures for personashop tests."""

import pytest

from personashop.config import EngineConfig
from personashop.personas import PersonaClassifier
from personashop.storage import InMemoryKeyValueStore


@pytest.fixture
def config() -> EngineConfig:
    """Engine config with timers disabled and in-memory storage."""
    return EngineConfig(
        storage_dir=None,
        reevaluate_interval_seconds=0,
        time_tick_seconds=0,
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    """Durable behavior storage."""
    return InMemoryKeyValueStore()


@pytest.fixture
def session_storage() -> InMemoryKeyValueStore:
    """Transient session marker storage."""
    return InMemoryKeyValueStore()


@pytest.fixture
def degraded_classifier() -> PersonaClassifier:
    """Classifier whose training always fails (no synthetic samples)."""
    return PersonaClassifier(samples_per_persona=0)

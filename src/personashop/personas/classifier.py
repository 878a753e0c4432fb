"""Persona classifier: a small feed-forward network trained on synthetic data.

The classifier moves through ``uninitialized -> training -> ready``. Training
happens once, in a worker thread, and any failure leaves the classifier in a
``degraded`` state where inference returns the uniform distribution. No
classifier fault is ever raised to callers.
"""

import asyncio
import logging
import math
from enum import Enum
from types import MappingProxyType
from typing import Sequence

import numpy as np
import torch
from numpy.typing import ArrayLike
from torch import nn

from personashop.behavior.features import NUM_FEATURES
from personashop.config import EngineConfig
from personashop.personas.models import (
    DEFAULT_PERSONA,
    PERSONA_ORDER,
    UNIFORM_SCORES,
    PersonaLabel,
    PersonaScores,
)
from personashop.personas.synthetic import generate_training_data

logger = logging.getLogger(__name__)


class ClassifierState(str, Enum):
    """Lifecycle of a persona classifier."""

    UNINITIALIZED = "uninitialized"
    TRAINING = "training"
    READY = "ready"
    DEGRADED = "degraded"


def build_model(hidden_units: Sequence[int] = (16, 8)) -> nn.Sequential:
    """Build the scoring network (features -> hidden ReLU layers -> persona logits)."""
    layers: list[nn.Module] = []
    in_features = NUM_FEATURES
    for units in hidden_units:
        layers.append(nn.Linear(in_features, units))
        layers.append(nn.ReLU())
        in_features = units
    layers.append(nn.Linear(in_features, len(PERSONA_ORDER)))
    return nn.Sequential(*layers)


def coerce_distribution(values: ArrayLike) -> PersonaScores:
    """Turn raw per-persona outputs into a probability distribution.

    Negative and NaN entries count as zero. If nothing positive remains the
    uniform distribution is returned.

    Args:
        values: One value per persona, in PERSONA_ORDER

    Returns:
        Read-only mapping of persona to probability, summing to 1
    """
    array = np.asarray(values, dtype=np.float64).reshape(-1)
    if array.shape[0] != len(PERSONA_ORDER):
        raise ValueError(f"Expected {len(PERSONA_ORDER)} scores, got {array.shape[0]}")

    array = np.clip(np.nan_to_num(array, nan=0.0, posinf=0.0, neginf=0.0), 0.0, None)
    total = float(array.sum())
    if not math.isfinite(total) or total <= 0.0:
        return UNIFORM_SCORES

    array = array / total
    return MappingProxyType({label: float(p) for label, p in zip(PERSONA_ORDER, array)})


def top_persona(scores: PersonaScores) -> PersonaLabel:
    """Return the highest-scoring persona.

    Exact ties go to the persona declared first in PersonaLabel, so the
    uniform distribution yields ``bargain_hunter``.
    """
    best = PERSONA_ORDER[0]
    best_score = scores.get(best, 0.0)
    for label in PERSONA_ORDER[1:]:
        score = scores.get(label, 0.0)
        if score > best_score:
            best, best_score = label, score
    return best


class PersonaClassifier:
    """Online persona inference over normalized behavior vectors."""

    def __init__(
        self,
        hidden_units: Sequence[int] = (16, 8),
        epochs: int = 50,
        samples_per_persona: int = 50,
        batch_size: int = 32,
        learning_rate: float = 0.01,
        seed: int = 42,
    ) -> None:
        """Initialize persona classifier (untrained).

        Args:
            hidden_units: Width of each hidden layer
            epochs: Training passes over the synthetic set
            samples_per_persona: Synthetic vectors generated per persona
            batch_size: Mini-batch size
            learning_rate: Adam learning rate
            seed: Seed for data generation, weight init and shuffling
        """
        self.hidden_units = tuple(hidden_units)
        self.epochs = epochs
        self.samples_per_persona = samples_per_persona
        self.batch_size = batch_size
        self.learning_rate = learning_rate
        self.seed = seed

        self._state = ClassifierState.UNINITIALIZED
        self._model: nn.Sequential | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "PersonaClassifier":
        """Create a classifier from engine configuration."""
        return cls(
            hidden_units=config.hidden_units,
            epochs=config.training_epochs,
            samples_per_persona=config.samples_per_persona,
            batch_size=config.batch_size,
            learning_rate=config.learning_rate,
            seed=config.seed,
        )

    @property
    def state(self) -> ClassifierState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        """True once training completed successfully."""
        return self._state is ClassifierState.READY

    async def initialize(self) -> None:
        """Build and train the model once.

        Safe to call repeatedly and concurrently: later callers wait for the
        first training run and then return.
        """
        if self._state in (ClassifierState.READY, ClassifierState.DEGRADED):
            return

        async with self._lock:
            if self._state in (ClassifierState.READY, ClassifierState.DEGRADED):
                return

            self._state = ClassifierState.TRAINING
            try:
                model = await asyncio.to_thread(self._build_and_train)
            except Exception:
                logger.exception("Persona classifier training failed; using uniform scores")
                self._state = ClassifierState.DEGRADED
                return

            self._model = model
            self._state = ClassifierState.READY
            logger.info("Persona classifier ready")

    def _build_and_train(self) -> nn.Sequential:
        """Train a fresh model on synthetic data (runs in a worker thread)."""
        features, labels = generate_training_data(
            samples_per_persona=self.samples_per_persona,
            seed=self.seed,
        )
        xs = torch.from_numpy(features)
        ys = torch.from_numpy(labels)
        n_samples = xs.shape[0]

        # Keep weight init reproducible without touching the global RNG
        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(self.seed)
            model = build_model(self.hidden_units)

        generator = torch.Generator().manual_seed(self.seed)
        optimizer = torch.optim.Adam(model.parameters(), lr=self.learning_rate)
        loss_fn = nn.CrossEntropyLoss()

        model.train()
        loss = torch.tensor(float("nan"))
        for _ in range(self.epochs):
            permutation = torch.randperm(n_samples, generator=generator)
            for start in range(0, n_samples, self.batch_size):
                batch = permutation[start : start + self.batch_size]
                optimizer.zero_grad()
                loss = loss_fn(model(xs[batch]), ys[batch])
                loss.backward()
                optimizer.step()

        # Parameters are immutable after training
        model.eval()
        for parameter in model.parameters():
            parameter.requires_grad_(False)

        logger.debug(
            "Trained persona classifier on %d samples, final batch loss %.4f",
            n_samples,
            loss.item(),
        )
        return model

    def classify(self, features: ArrayLike) -> PersonaScores:
        """Score a normalized behavior vector.

        Args:
            features: Vector of length 10 from ``normalize``

        Returns:
            Probability per persona (uniform unless the model is ready)
        """
        vector = np.asarray(features, dtype=np.float32).reshape(-1)
        if vector.shape[0] != NUM_FEATURES:
            raise ValueError(f"Expected {NUM_FEATURES} features, got {vector.shape[0]}")

        if self._state is not ClassifierState.READY or self._model is None:
            return UNIFORM_SCORES

        with torch.no_grad():
            logits = self._model(torch.tensor(vector).unsqueeze(0))
            probabilities = torch.softmax(logits, dim=-1)[0].numpy()

        return coerce_distribution(probabilities)

    def predict(self, features: ArrayLike) -> tuple[PersonaLabel, PersonaScores]:
        """Classify and pick the top persona.

        Returns ``(new_visitor, uniform)`` while the model is unavailable.
        """
        if self._state is not ClassifierState.READY:
            return DEFAULT_PERSONA, UNIFORM_SCORES

        scores = self.classify(features)
        return top_persona(scores), scores

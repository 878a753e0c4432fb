"""Synthetic labeled behavior vectors for classifier warm-up training.

Each persona is described by a per-feature uniform range over the normalized
feature space (see ``personashop.behavior.features``). Samples are drawn from
a seeded generator so every process trains on identical data.
"""

import numpy as np
from numpy.typing import NDArray

from personashop.behavior.features import FEATURE_NAMES, NUM_FEATURES
from personashop.personas.models import PERSONA_ORDER, PersonaLabel

FeatureRange = tuple[float, float]

# (low, high) per feature, in FEATURE_NAMES order
PERSONA_FEATURE_RANGES: dict[PersonaLabel, tuple[FeatureRange, ...]] = {
    PersonaLabel.BARGAIN_HUNTER: (
        (0.0, 0.3),  # low clicks
        (0.8, 1.0),  # high scroll depth
        (0.6, 1.0),  # medium-high time
        (0.0, 0.4),  # low-medium product views
        (0.0, 0.3),  # low cart
        (0.0, 0.5),  # medium searches
        (0.7, 1.0),  # high price filter usage
        (0.0, 0.4),  # medium reviews
        (0.0, 0.5),  # varied categories
        (0.0, 1.0),  # any device
    ),
    PersonaLabel.IMPULSE_BUYER: (
        (0.7, 1.0),  # high clicks
        (0.0, 0.4),  # low scroll depth
        (0.0, 0.3),  # low time
        (0.5, 1.0),  # medium-high product views
        (0.7, 1.0),  # high cart
        (0.0, 0.3),  # low searches
        (0.0, 0.2),  # low price filter
        (0.0, 0.2),  # low reviews
        (0.0, 0.8),  # varied categories
        (0.0, 1.0),
    ),
    PersonaLabel.RESEARCHER: (
        (0.4, 0.7),  # medium clicks
        (0.8, 1.0),  # high scroll depth
        (0.8, 1.0),  # high time
        (0.3, 0.7),  # medium product views
        (0.0, 0.4),  # low-medium cart
        (0.6, 1.0),  # high searches
        (0.4, 0.8),  # medium price filter
        (0.8, 1.0),  # high reviews
        (0.5, 0.8),  # focused categories
        (0.0, 1.0),
    ),
    PersonaLabel.LOYAL_CUSTOMER: (
        (0.5, 0.8),  # medium-high clicks
        (0.5, 0.8),  # medium scroll
        (0.4, 0.8),  # medium time
        (0.6, 1.0),  # high product views
        (0.5, 0.9),  # medium-high cart
        (0.3, 0.6),  # low-medium searches
        (0.0, 0.4),  # low-medium price filter
        (0.3, 0.7),  # medium reviews
        (0.7, 1.0),  # high category spread
        (0.0, 1.0),
    ),
    PersonaLabel.NEW_VISITOR: (
        (0.0, 0.3),
        (0.0, 0.5),
        (0.0, 0.4),
        (0.0, 0.3),
        (0.0, 0.2),
        (0.0, 0.4),
        (0.0, 0.3),
        (0.0, 0.3),
        (0.0, 0.3),
        (0.0, 1.0),
    ),
}


def generate_training_data(
    samples_per_persona: int = 50,
    seed: int = 42,
) -> tuple[NDArray[np.float32], NDArray[np.int64]]:
    """Generate labeled synthetic feature vectors.

    Args:
        samples_per_persona: Number of vectors drawn per persona
        seed: Random generator seed

    Returns:
        Tuple of (features of shape (n, 10), class indices of shape (n,)),
        grouped by persona in PERSONA_ORDER
    """
    if samples_per_persona <= 0:
        raise ValueError("samples_per_persona must be positive")

    rng = np.random.default_rng(seed=seed)

    features = []
    labels = []
    for index, persona in enumerate(PERSONA_ORDER):
        ranges = np.array(PERSONA_FEATURE_RANGES[persona], dtype=np.float32)
        if ranges.shape != (NUM_FEATURES, 2):
            raise ValueError(
                f"{persona.value} needs {len(FEATURE_NAMES)} feature ranges, got {len(ranges)}"
            )

        low, high = ranges[:, 0], ranges[:, 1]
        samples = low + rng.random((samples_per_persona, NUM_FEATURES), dtype=np.float32) * (
            high - low
        )
        features.append(samples)
        labels.append(np.full(samples_per_persona, index, dtype=np.int64))

    return np.vstack(features), np.concatenate(labels)

"""The sample space: fifteen hand-placed nodes spread across the w axis.

Four human, five ai, three hybrid and three kernel nodes, with properties
jittered by a seeded random generator so the sample is reproducible.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from hyperpaint.model import Category, Point4D

if TYPE_CHECKING:
    from hyperpaint.engine.store import SpatialStore
    from hyperpaint.model import HyperNode

DEFAULT_SEED = 123456789

SAMPLE_POSITIONS: dict[Category, list[Point4D]] = {
    Category.HUMAN: [
        Point4D(-3, 2, 1, -1.5),
        Point4D(-2, 1.5, 0.5, 0),
        Point4D(-1.5, 2.5, -0.5, 1.2),
        Point4D(-2.8, 0.8, 1.2, -0.8),
    ],
    Category.AI: [
        Point4D(3, 1, 0, 0),
        Point4D(2.5, 2, 1, 0.8),
        Point4D(3.5, 0.5, -1, 0.8),
        Point4D(2.8, 1.8, 0.3, -0.5),
        Point4D(3.2, 0.2, 0.7, 1.5),
    ],
    Category.HYBRID: [
        Point4D(0, 3, 0, 0.5),
        Point4D(-0.5, -1, 2, -1),
        Point4D(0.8, 0, -1.5, 2),
    ],
    Category.KERNEL: [
        Point4D(0, 0, 0, 0),
        Point4D(0.3, 0.3, 0.3, 1.8),
        Point4D(-0.2, -0.1, 0.4, -2.2),
    ],
}

# Base intensity per category; the generator adds up to +0.4
BASE_INTENSITY: dict[Category, float] = {
    Category.HUMAN: 0.8,
    Category.AI: 1.2,
    Category.HYBRID: 1.0,
    Category.KERNEL: 1.8,
}

# Base kernel coupling per category; the generator adds up to +0.5
BASE_KERNEL_COUPLING: dict[Category, float] = {
    Category.HUMAN: 0.8,
    Category.AI: 1.5,
    Category.HYBRID: 0.8,
    Category.KERNEL: 3.0,
}


def populate_sample_space(store: SpatialStore, seed: int = DEFAULT_SEED) -> list[HyperNode]:
    """Add the sample nodes to a store.

    Args:
        store: Store to populate. Existing content is kept.
        seed: Seed for the property jitter.

    Returns:
        The nodes that were added, in insertion order.
    """
    rng = random.Random(seed)
    added = []
    for category, positions in SAMPLE_POSITIONS.items():
        for position in positions:
            properties = {
                "intensity": BASE_INTENSITY[category] + rng.random() * 0.4,
                "coherence": 0.6 + rng.random() * 0.3,
                "kernelCoupling": BASE_KERNEL_COUPLING[category] + rng.random() * 0.5,
            }
            added.append(store.add_node(position, category, properties, recompute=False))
    store.recompute_stats()
    return added

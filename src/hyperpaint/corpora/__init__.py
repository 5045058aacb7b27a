"""Built-in sample data sets."""

from hyperpaint.corpora.sample_space import DEFAULT_SEED, SAMPLE_POSITIONS, populate_sample_space

__all__ = ["DEFAULT_SEED", "SAMPLE_POSITIONS", "populate_sample_space"]

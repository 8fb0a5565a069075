"""Domain models, normalization and metrics."""

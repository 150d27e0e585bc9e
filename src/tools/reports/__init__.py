"""Report aggregation helpers."""

"""Domain types, event bus and the per-frame gesture engine."""

"""Shared models, errors, aggregation helpers and logging."""

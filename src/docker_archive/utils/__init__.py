"""Utility functions for docker archive construction."""

from .digest import calculate_digest, is_layer_id, validate_digest

__all__ = ["calculate_digest", "is_layer_id", "validate_digest"]

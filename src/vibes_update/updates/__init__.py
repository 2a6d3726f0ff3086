"""Registered text transformations applied to artifacts."""

from vibes_update.updates.registry import (
    REGISTRY,
    execute_update,
    execute_updates,
    get_applicable_updates,
    get_update_by_id,
)

__all__ = [
    "REGISTRY",
    "execute_update",
    "execute_updates",
    "get_applicable_updates",
    "get_update_by_id",
]

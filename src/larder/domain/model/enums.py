"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Entity families exposed by a remote."""

    RECIPE = "recipe"
    INGREDIENT = "ingredient"
    LABEL = "label"

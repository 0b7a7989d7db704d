"""Public domain model surface."""

from __future__ import annotations

from larder.domain.model.entities import (
    Classifications,
    Dependency,
    Ingredient,
    IngredientIndex,
    Label,
    LabelIndex,
    Recipe,
    RecipeIndex,
    Requirement,
)
from larder.domain.model.enums import EntityKind

type EntityIndex = RecipeIndex | IngredientIndex | LabelIndex

__all__ = [
    "Classifications",
    "Dependency",
    "EntityIndex",
    "EntityKind",
    "Ingredient",
    "IngredientIndex",
    "Label",
    "LabelIndex",
    "Recipe",
    "RecipeIndex",
    "Requirement",
]

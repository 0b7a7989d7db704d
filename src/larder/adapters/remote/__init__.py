"""Public interface for the recipe server adapter."""

from __future__ import annotations

from .client import RemoteClient
from .schema import Envelope, IngredientPayload, LabelPayload, RecipePayload
from .translator import parse_ingredient, parse_label, parse_recipe

__all__ = [
    "Envelope",
    "IngredientPayload",
    "LabelPayload",
    "RecipePayload",
    "RemoteClient",
    "parse_ingredient",
    "parse_label",
    "parse_recipe",
]

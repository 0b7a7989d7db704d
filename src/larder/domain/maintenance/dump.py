"""Anonymized, deterministic snapshot of a recipe graph.

Server ids are replaced by placeholders numbered in normalized-name order, so
dumping an unchanged remote twice yields identical documents no matter which ids
the server assigned or in which order it answered.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT
from larder.domain.errors import CycleError
from larder.domain.model import EntityKind, Label
from larder.domain.tiering import tier_recipes
from larder.domain.translation import (
    TranslationTables,
    anonymize,
    rewrite_ingredient,
    rewrite_label,
    rewrite_recipe,
)

from .fetching import fetch_ingredients, fetch_recipes, referenced_ingredients, referenced_labels
from .report import DumpReport

if TYPE_CHECKING:
    from larder.domain.model import Ingredient, Recipe
    from larder.domain.ports import RemoteGateway

log = logging.getLogger(__name__)

DUMP_FORMAT_VERSION = 1


@dataclass(frozen=True, slots=True)
class DumpDocument:
    """Portable snapshot; recipes are listed in dependency order."""

    ingredients: tuple[Ingredient, ...]
    labels: tuple[Label, ...]
    recipes: tuple[Recipe, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "version": DUMP_FORMAT_VERSION,
            "ingredients": [_ingredient_payload(item) for item in self.ingredients],
            "labels": [_label_payload(item) for item in self.labels],
            "recipes": [_recipe_payload(item) for item in self.recipes],
        }


async def dump_graph(
    source: RemoteGateway,
    *,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> DumpReport:
    report = DumpReport()
    recipes = await fetch_recipes(source, report=report, limit=limit)
    if recipes is None:
        return report

    try:
        tiers = tier_recipes(recipes)
    except CycleError as exc:
        report.abort(log, "Cannot order recipes: %s", exc)
        return report

    ingredients = await fetch_ingredients(
        source, referenced_ingredients(recipes), report=report, limit=limit
    )
    labels = [Label(id=tag.id, name=tag.name) for tag in referenced_labels(recipes)]

    label_table = anonymize(EntityKind.LABEL, labels)
    tables = TranslationTables(
        ingredients=anonymize(EntityKind.INGREDIENT, ingredients),
        labels=label_table,
        recipes=anonymize(EntityKind.RECIPE, recipes),
    )

    dumped_recipes: list[Recipe] = []
    for tier in tiers:
        rewritten = [rewrite_recipe(recipe, tables, report=report) for recipe in tier]
        dumped_recipes.extend(sorted(rewritten, key=_by_placeholder))

    report.document = DumpDocument(
        ingredients=tuple(
            sorted(
                (rewrite_ingredient(item, tables.ingredients) for item in ingredients),
                key=_by_placeholder,
            )
        ),
        labels=tuple(
            sorted(
                (rewrite_label(item, label_table) for item in labels),
                key=_by_placeholder,
            )
        ),
        recipes=tuple(dumped_recipes),
    )
    log.info(
        "Dumped %d recipes, %d ingredients, %d labels",
        len(dumped_recipes),
        len(ingredients),
        len(labels),
    )
    return report


def _ingredient_payload(ingredient: Ingredient) -> dict[str, Any]:
    return {
        "id": ingredient.id,
        "name": ingredient.name,
        "classifications": asdict(ingredient.classifications),
        "used_in": [],
    }


def _label_payload(label: Label) -> dict[str, Any]:
    return {"id": label.id, "name": label.name, "tagged_recipes": []}


def _recipe_payload(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "name": recipe.name,
        "author": recipe.author,
        "directions": recipe.directions,
        "information": recipe.information,
        "classifications": asdict(recipe.classifications),
        "requirements": [
            {
                "ingredient": {"id": item.ingredient.id, "name": item.ingredient.name},
                "quantity": item.quantity,
                "optional": item.optional,
            }
            for item in sorted(recipe.requirements, key=lambda item: _numbered(item.ingredient.id))
        ],
        "dependencies": [
            {
                "recipe": {"id": item.recipe.id, "name": item.recipe.name},
                "quantity": item.quantity,
                "optional": item.optional,
            }
            for item in sorted(recipe.dependencies, key=lambda item: _numbered(item.recipe.id))
        ],
        "tags": [
            {"id": tag.id, "name": tag.name}
            for tag in sorted(recipe.tags, key=lambda tag: _numbered(tag.id))
        ],
    }


def _numbered(placeholder: str) -> tuple[int, str]:
    """Sort ``__kind_10`` after ``__kind_9``."""

    _, _, position = placeholder.rpartition("_")
    return (int(position), placeholder) if position.isdigit() else (-1, placeholder)


def _by_placeholder(entity: Ingredient | Label | Recipe) -> tuple[int, str]:
    return _numbered(entity.id)

"""Fetch stages shared by clone and dump."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT, gather_bounded
from larder.domain.errors import RemoteError
from larder.domain.model import Ingredient

if TYPE_CHECKING:
    from collections.abc import Iterable

    from larder.domain.model import IngredientIndex, LabelIndex, Recipe, RecipeIndex
    from larder.domain.ports import RemoteGateway

    from .report import RunReport

log = logging.getLogger(__name__)


async def fetch_recipes(
    source: RemoteGateway,
    *,
    report: RunReport,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> list[Recipe] | None:
    """Fetch every recipe of ``source``; ``None`` when the index itself is unavailable."""

    try:
        index = await source.recipe_index("")
    except RemoteError as exc:
        report.abort(log, "Could not list recipes: %s", exc)
        return None

    async def fetch(entry: RecipeIndex) -> Recipe:
        return await source.recipe_get(entry.id)

    recipes: list[Recipe] = []
    for outcome in await gather_bounded(index, fetch, limit=limit):
        if outcome.value is None:
            report.warning(log, "Skipping recipe %r: %s", outcome.item.name, outcome.error)
            continue
        recipes.append(outcome.value)
    log.info("Fetched %d of %d recipes", len(recipes), len(index))
    return recipes


def referenced_ingredients(recipes: Iterable[Recipe]) -> list[IngredientIndex]:
    unique = {
        requirement.ingredient.id: requirement.ingredient
        for recipe in recipes
        for requirement in recipe.requirements
    }
    return [unique[ingredient_id] for ingredient_id in sorted(unique)]


def referenced_labels(recipes: Iterable[Recipe]) -> list[LabelIndex]:
    unique = {tag.id: tag for recipe in recipes for tag in recipe.tags}
    return [unique[label_id] for label_id in sorted(unique)]


async def fetch_ingredients(
    source: RemoteGateway,
    references: Iterable[IngredientIndex],
    *,
    report: RunReport,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> list[Ingredient]:
    """Fetch full ingredient records to carry their classifications along.

    An ingredient that cannot be fetched is kept with default classifications.
    """

    async def fetch(reference: IngredientIndex) -> Ingredient:
        return await source.ingredient_get(reference.id)

    ingredients: list[Ingredient] = []
    for outcome in await gather_bounded(list(references), fetch, limit=limit):
        if outcome.value is None:
            report.warning(
                log,
                "Could not fetch ingredient %r, classifications are lost: %s",
                outcome.item.name,
                outcome.error,
            )
            ingredients.append(Ingredient(id=outcome.item.id, name=outcome.item.name))
            continue
        ingredients.append(outcome.value)
    return ingredients

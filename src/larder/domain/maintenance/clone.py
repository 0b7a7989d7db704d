"""Replay the recipe graph of one remote onto another.

Recipes are created tier by tier so that a recipe's prerequisites already exist
on the destination when its dependencies are attached. Each tier runs in two
fan-outs: the recipes are created, then the tags, requirements and dependencies
of every created recipe are attached. The recipe table is only extended once a
tier has fully joined.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT, gather_bounded
from larder.domain.errors import CycleError
from larder.domain.tiering import tier_recipes
from larder.domain.translation import (
    TranslationTables,
    replay_ingredients,
    translate_dependencies,
    translate_requirements,
    translate_tags,
)

from .fetching import fetch_ingredients, fetch_recipes, referenced_ingredients
from .report import CloneReport

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from larder.domain.model import Recipe, RecipeIndex
    from larder.domain.ports import RemoteGateway

    from .report import RunReport

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Attachment:
    recipe_name: str
    description: str
    call: Callable[[], Awaitable[None]]


async def clone_graph(
    source: RemoteGateway,
    destination: RemoteGateway,
    *,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> CloneReport:
    """Copy every recipe of ``source``, with its ingredients, labels and links."""

    report = CloneReport()
    recipes = await fetch_recipes(source, report=report, limit=limit)
    if recipes is None:
        return report
    report.fetched_recipes = len(recipes)

    try:
        tiers = tier_recipes(recipes)
    except CycleError as exc:
        report.abort(log, "Cannot order recipes: %s", exc)
        return report

    ingredients = await fetch_ingredients(
        source, referenced_ingredients(recipes), report=report, limit=limit
    )
    tables = TranslationTables()
    tables.ingredients = await replay_ingredients(
        destination, ingredients, report=report, limit=limit
    )
    report.created_ingredients = len(tables.ingredients)

    async def create(recipe: Recipe) -> RecipeIndex:
        return await destination.recipe_create(
            recipe.name,
            author=recipe.author,
            directions=recipe.directions,
            information=recipe.information,
        )

    async def attach(attachment: _Attachment) -> None:
        await attachment.call()

    for depth, tier in enumerate(tiers):
        log.info("Cloning tier %d (%d recipes)", depth, len(tier))
        created: list[tuple[str, str]] = []
        attachments: list[_Attachment] = []
        for outcome in await gather_bounded(tier, create, limit=limit):
            if outcome.value is None:
                report.failure(
                    log, "Could not create recipe %r: %s", outcome.item.name, outcome.error
                )
                continue
            created.append((outcome.item.id, outcome.value.id))
            report.created_recipes.append(outcome.value)
            attachments.extend(
                _attachments(destination, outcome.item, outcome.value.id, tables, report=report)
            )

        for outcome in await gather_bounded(attachments, attach, limit=limit):
            if outcome.error is not None:
                report.failure(
                    log,
                    "Could not attach %s to %r: %s",
                    outcome.item.description,
                    outcome.item.recipe_name,
                    outcome.error,
                )
        tables.recipes.update(created)

    log.info(
        "Cloned %d of %d recipes, %d ingredients",
        len(report.created_recipes),
        report.fetched_recipes,
        report.created_ingredients,
    )
    return report


def _attachments(
    destination: RemoteGateway,
    recipe: Recipe,
    created_id: str,
    tables: TranslationTables,
    *,
    report: RunReport,
) -> list[_Attachment]:
    attachments: list[_Attachment] = []
    for tag in translate_tags(recipe, tables.labels, report=report):
        attachments.append(
            _Attachment(
                recipe.name,
                f"tag {tag.name!r}",
                partial(destination.recipe_tag, created_id, tag.name),
            )
        )
    for requirement in translate_requirements(recipe, tables.ingredients, report=report):
        attachments.append(
            _Attachment(
                recipe.name,
                f"requirement on {requirement.ingredient.name!r}",
                partial(
                    destination.requirement_create,
                    created_id,
                    requirement.ingredient.id,
                    requirement.quantity,
                    optional=requirement.optional,
                ),
            )
        )
    for dependency in translate_dependencies(recipe, tables.recipes, report=report):
        attachments.append(
            _Attachment(
                recipe.name,
                f"dependency on {dependency.recipe.name!r}",
                partial(
                    destination.dependency_create,
                    created_id,
                    dependency.recipe.id,
                    quantity=dependency.quantity,
                    optional=dependency.optional,
                ),
            )
        )
    return attachments

"""Fold an obsolete ingredient into its replacement.

Each recipe using the obsolete ingredient is moved on its own: the requirement on
the target is created first and the obsolete requirement is only deleted once
that creation went through. The obsolete ingredient is deleted last, and only
when every recipe moved, so a failed run can simply be repeated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT, gather_bounded
from larder.domain.errors import RemoteError

from .report import MergeReport

if TYPE_CHECKING:
    from larder.domain.model import IngredientIndex, RecipeIndex
    from larder.domain.ports import RemoteGateway

log = logging.getLogger(__name__)


async def merge_ingredient(
    remote: RemoteGateway,
    target: IngredientIndex,
    obsolete: IngredientIndex,
    *,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> MergeReport:
    report = MergeReport()
    if target.id == obsolete.id:
        report.abort(log, "Cannot merge ingredient %r into itself", target.name)
        return report

    try:
        record = await remote.ingredient_get(obsolete.id)
    except RemoteError as exc:
        report.abort(log, "Could not fetch ingredient %r: %s", obsolete.name, exc)
        return report

    async def move(recipe: RecipeIndex) -> bool:
        return await _move_requirement(remote, recipe, target, obsolete, report=report)

    users = sorted(record.used_in, key=lambda recipe: recipe.id)
    complete = True
    for outcome in await gather_bounded(users, move, limit=limit):
        if outcome.error is not None:
            complete = False
            report.failure(
                log,
                "Could not move %r of %r to %r: %s",
                obsolete.name,
                outcome.item.name,
                target.name,
                outcome.error,
            )
        elif outcome.value:
            report.moved.append(outcome.item)

    if not complete:
        report.abort(
            log,
            "Keeping ingredient %r: %d recipe(s) still use it",
            obsolete.name,
            len(users) - len(report.moved),
        )
        return report

    try:
        await remote.ingredient_delete(obsolete.id)
    except RemoteError as exc:
        report.abort(log, "Could not delete ingredient %r: %s", obsolete.name, exc)
        return report
    report.obsolete_deleted = True
    log.info(
        "Merged %r into %r across %d recipe(s)", obsolete.name, target.name, len(report.moved)
    )
    return report


async def _move_requirement(
    remote: RemoteGateway,
    recipe: RecipeIndex,
    target: IngredientIndex,
    obsolete: IngredientIndex,
    *,
    report: MergeReport,
) -> bool:
    requirements = {
        requirement.ingredient.id: requirement
        for requirement in await remote.recipe_requirements(recipe.id)
    }
    current = requirements.get(obsolete.id)
    if current is None:
        report.warning(log, "Recipe %r no longer requires %r", recipe.name, obsolete.name)
        return False

    if target.id in requirements:
        report.warning(
            log,
            "Recipe %r already requires %r, dropping its %r quantity %r",
            recipe.name,
            target.name,
            obsolete.name,
            current.quantity,
        )
    else:
        await remote.requirement_create(recipe.id, target.id, current.quantity)
    await remote.requirement_delete(recipe.id, obsolete.id)
    return True

"""Layer a recipe set so that prerequisites come first."""

from __future__ import annotations

from typing import TYPE_CHECKING

from larder.domain.errors import CycleError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from larder.domain.model import Recipe


def tier_recipes(recipes: Iterable[Recipe]) -> list[list[Recipe]]:
    """Split ``recipes`` into tiers; a recipe only depends on recipes of earlier tiers.

    Dependencies on recipes outside the given set do not gate anything. Each tier
    is sorted by recipe id. Raises ``CycleError`` when in-set dependencies loop.
    """

    unique = {recipe.id: recipe for recipe in recipes}
    in_set = frozenset(unique)
    pending = {
        recipe_id: recipe.dependency_ids & in_set for recipe_id, recipe in unique.items()
    }

    tiers: list[list[Recipe]] = []
    placed: set[str] = set()
    # every productive pass places at least one recipe
    for _ in range(len(pending) + 1):
        if not pending:
            return tiers
        ready = sorted(
            recipe_id for recipe_id, needs in pending.items() if needs <= placed
        )
        if not ready:
            raise CycleError(pending)
        tiers.append([unique[recipe_id] for recipe_id in ready])
        placed.update(ready)
        for recipe_id in ready:
            del pending[recipe_id]

    raise CycleError(pending)

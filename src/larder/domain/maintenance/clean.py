"""Delete ingredients and labels no recipe refers to."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT, gather_bounded
from larder.domain.errors import RemoteError

from .report import CleanReport

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from larder.domain.model import Ingredient, IngredientIndex, Label, LabelIndex
    from larder.domain.ports import RemoteGateway

log = logging.getLogger(__name__)


async def clean_remote(
    remote: RemoteGateway,
    *,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> CleanReport:
    """Run the ingredient pass, then the label pass; they do not affect each other."""

    report = CleanReport()
    report.deleted_ingredients = await _reclaim(
        "ingredient",
        list_all=remote.ingredient_index,
        fetch=remote.ingredient_get,
        is_orphan=_unused_ingredient,
        delete=remote.ingredient_delete,
        report=report,
        limit=limit,
    )
    report.deleted_labels = await _reclaim(
        "label",
        list_all=remote.label_index,
        fetch=remote.label_get,
        is_orphan=_unused_label,
        delete=remote.label_delete,
        report=report,
        limit=limit,
    )
    return report


def _unused_ingredient(ingredient: Ingredient) -> bool:
    return not ingredient.used_in


def _unused_label(label: Label) -> bool:
    return not label.tagged_recipes


async def _reclaim[TIndex: (IngredientIndex, LabelIndex), TEntity: (Ingredient, Label)](
    kind: str,
    *,
    list_all: Callable[[str], Awaitable[list[TIndex]]],
    fetch: Callable[[str], Awaitable[TEntity]],
    is_orphan: Callable[[TEntity], bool],
    delete: Callable[[str], Awaitable[None]],
    report: CleanReport,
    limit: int,
) -> list[TIndex]:
    try:
        index = await list_all("")
    except RemoteError as exc:
        report.abort(log, "Could not list %ss: %s", kind, exc)
        return []

    async def fetch_one(entry: TIndex) -> TEntity:
        return await fetch(entry.id)

    orphans: dict[str, TIndex] = {}
    for outcome in await gather_bounded(index, fetch_one, limit=limit):
        if outcome.value is None:
            report.warning(
                log, "Leaving %s %r alone this run: %s", kind, outcome.item.name, outcome.error
            )
            continue
        if is_orphan(outcome.value):
            orphans.setdefault(outcome.item.id, outcome.item)

    async def delete_one(entry: TIndex) -> None:
        await delete(entry.id)

    deleted: list[TIndex] = []
    for outcome in await gather_bounded(list(orphans.values()), delete_one, limit=limit):
        if outcome.error is not None:
            report.failure(
                log, "Could not delete %s %r: %s", kind, outcome.item.name, outcome.error
            )
            continue
        log.info("Deleted unused %s %r", kind, outcome.item.name)
        deleted.append(outcome.item)
    log.info("Reclaimed %d of %d %ss", len(deleted), len(index), kind)
    return deleted

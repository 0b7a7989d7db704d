"""Identifier translation tables for replaying or anonymizing a recipe graph.

A table maps ids of one entity kind on the source remote to the ids they take
downstream: ids returned by a destination remote (replay) or deterministic
placeholders (anonymize). Tables are built for one run and passed explicitly
through its stages.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT, gather_bounded
from larder.domain.errors import RemoteError
from larder.domain.model import (
    EntityKind,
    Ingredient,
    IngredientIndex,
    LabelIndex,
    Recipe,
    RecipeIndex,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from larder.domain.maintenance.report import RunReport
    from larder.domain.model import Dependency, EntityIndex, Label, Requirement
    from larder.domain.ports import RemoteGateway

log = logging.getLogger(__name__)

type Anonymizable = EntityIndex | Recipe | Ingredient | Label


@dataclass(slots=True)
class TranslationTable:
    """``source_id -> mapped_id`` for one entity kind."""

    kind: EntityKind
    _mapping: dict[str, str] = field(default_factory=dict[str, str], repr=False)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def get(self, source_id: str) -> str | None:
        return self._mapping.get(source_id)

    def record(self, source_id: str, mapped_id: str) -> None:
        self._mapping[source_id] = mapped_id

    def update(self, mappings: Iterable[tuple[str, str]]) -> None:
        for source_id, mapped_id in mappings:
            self.record(source_id, mapped_id)


@dataclass(slots=True)
class TranslationTables:
    """Per-run tables; ``labels is None`` lets tags through untranslated."""

    ingredients: TranslationTable = field(
        default_factory=lambda: TranslationTable(EntityKind.INGREDIENT)
    )
    recipes: TranslationTable = field(default_factory=lambda: TranslationTable(EntityKind.RECIPE))
    labels: TranslationTable | None = None


def normalize_name(value: str) -> str:
    """Diacritic- and case-insensitive form of a display name."""

    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.casefold()
    return " ".join(text.split())


def placeholder_id(kind: EntityKind, position: int) -> str:
    return f"__{kind}_{position}"


def anonymize(kind: EntityKind, entities: Iterable[Anonymizable]) -> TranslationTable:
    """Number ``entities`` by normalized name, independently of their source ids.

    Entities sharing a name are told apart by their content before falling back
    to the source id.
    """

    unique = {entity.id: entity for entity in entities}
    ordered = sorted(
        unique.values(),
        key=lambda entity: (
            normalize_name(entity.name),
            entity.name,
            _content_key(entity),
            entity.id,
        ),
    )
    table = TranslationTable(kind)
    for position, entity in enumerate(ordered):
        table.record(entity.id, placeholder_id(kind, position))
    return table


def _content_key(entity: Anonymizable) -> tuple[str, ...]:
    if isinstance(entity, Recipe):
        return (entity.author, entity.directions, entity.information)
    if isinstance(entity, Ingredient):
        return tuple(entity.classifications.terms())
    return ()


async def replay_ingredients(
    destination: RemoteGateway,
    ingredients: Iterable[Ingredient],
    *,
    report: RunReport,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> TranslationTable:
    """Create ``ingredients`` on ``destination`` and map source ids to the new ids."""

    async def create(ingredient: Ingredient) -> str:
        created = await destination.ingredient_create(ingredient.name)
        if not ingredient.classifications.is_default:
            try:
                await destination.ingredient_update(created.id, ingredient.classifications)
            except RemoteError as exc:
                report.warning(
                    log,
                    "Created ingredient %r without its classifications: %s",
                    ingredient.name,
                    exc,
                )
        return created.id

    table = TranslationTable(EntityKind.INGREDIENT)
    outcomes = await gather_bounded(list(ingredients), create, limit=limit)
    for outcome in outcomes:
        if outcome.value is None:
            report.failure(
                log,
                "Could not create ingredient %r: %s",
                outcome.item.name,
                outcome.error,
            )
            continue
        table.record(outcome.item.id, outcome.value)
    log.info("Ingredient table holds %d of %d ingredients", len(table), len(outcomes))
    return table


def translate_requirements(
    recipe: Recipe,
    table: TranslationTable,
    *,
    report: RunReport,
) -> list[Requirement]:
    translated: list[Requirement] = []
    for requirement in recipe.requirements:
        mapped = table.get(requirement.ingredient.id)
        if mapped is None:
            report.warning(
                log,
                "Dropping requirement of %r on unmapped ingredient %r",
                recipe.name,
                requirement.ingredient.name,
            )
            continue
        translated.append(
            replace(
                requirement,
                ingredient=IngredientIndex(id=mapped, name=requirement.ingredient.name),
            )
        )
    return sorted(translated, key=lambda requirement: requirement.ingredient.id)


def translate_dependencies(
    recipe: Recipe,
    table: TranslationTable,
    *,
    report: RunReport,
) -> list[Dependency]:
    translated: list[Dependency] = []
    for dependency in recipe.dependencies:
        mapped = table.get(dependency.recipe.id)
        if mapped is None:
            report.warning(
                log,
                "Dropping dependency of %r on unmapped recipe %r",
                recipe.name,
                dependency.recipe.name,
            )
            continue
        translated.append(
            replace(dependency, recipe=RecipeIndex(id=mapped, name=dependency.recipe.name))
        )
    return sorted(translated, key=lambda dependency: dependency.recipe.id)


def translate_tags(
    recipe: Recipe,
    table: TranslationTable | None,
    *,
    report: RunReport,
) -> list[LabelIndex]:
    if table is None:
        return sorted(recipe.tags, key=lambda tag: (tag.name, tag.id))
    translated: list[LabelIndex] = []
    for tag in recipe.tags:
        mapped = table.get(tag.id)
        if mapped is None:
            report.warning(log, "Dropping tag %r of %r: unmapped label", tag.name, recipe.name)
            continue
        translated.append(LabelIndex(id=mapped, name=tag.name))
    return sorted(translated, key=lambda tag: tag.id)


def rewrite_recipe(
    recipe: Recipe,
    tables: TranslationTables,
    *,
    report: RunReport,
) -> Recipe:
    """Return ``recipe`` with its id and every reference passed through ``tables``."""

    recipe_id = tables.recipes.get(recipe.id)
    if recipe_id is None:
        raise KeyError(f"Recipe {recipe.id!r} has no entry in the recipe table")
    return replace(
        recipe,
        id=recipe_id,
        requirements=frozenset(translate_requirements(recipe, tables.ingredients, report=report)),
        dependencies=frozenset(translate_dependencies(recipe, tables.recipes, report=report)),
        tags=frozenset(translate_tags(recipe, tables.labels, report=report)),
    )


def rewrite_ingredient(ingredient: Ingredient, table: TranslationTable) -> Ingredient:
    mapped = table.get(ingredient.id)
    if mapped is None:
        raise KeyError(f"Ingredient {ingredient.id!r} has no entry in the ingredient table")
    return replace(ingredient, id=mapped, used_in=frozenset())


def rewrite_label(label: Label, table: TranslationTable) -> Label:
    mapped = table.get(label.id)
    if mapped is None:
        raise KeyError(f"Label {label.id!r} has no entry in the label table")
    return replace(label, id=mapped, tagged_recipes=frozenset())

"""Translate recipe server payloads into domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from larder.domain.model import (
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

if TYPE_CHECKING:
    from .schema import (
        ClassificationsPayload,
        IndexPayload,
        IngredientPayload,
        LabelPayload,
        RecipePayload,
        RequirementPayload,
    )


def parse_recipe_index(payload: IndexPayload) -> RecipeIndex:
    return RecipeIndex(id=payload.id, name=payload.name)


def parse_ingredient_index(payload: IndexPayload) -> IngredientIndex:
    return IngredientIndex(id=payload.id, name=payload.name)


def parse_label_index(payload: IndexPayload) -> LabelIndex:
    return LabelIndex(id=payload.id, name=payload.name)


def parse_classifications(payload: ClassificationsPayload) -> Classifications:
    return Classifications(
        dairy=payload.dairy,
        meat=payload.meat,
        gluten=payload.gluten,
        animal_product=payload.animal_product,
    )


def parse_requirement(payload: RequirementPayload) -> Requirement:
    return Requirement(
        ingredient=parse_ingredient_index(payload.ingredient),
        quantity=payload.quantity,
        optional=payload.optional,
    )


def parse_recipe(payload: RecipePayload) -> Recipe:
    """Build a recipe; duplicate edges collapse onto the first occurrence."""

    requirements: dict[str, Requirement] = {}
    for item in payload.requirements:
        requirements.setdefault(item.ingredient.id, parse_requirement(item))
    dependencies: dict[str, Dependency] = {}
    for item in payload.dependencies:
        dependencies.setdefault(
            item.recipe.id,
            Dependency(
                recipe=parse_recipe_index(item.recipe),
                quantity=item.quantity,
                optional=item.optional,
            ),
        )
    return Recipe(
        id=payload.id,
        name=payload.name,
        author=payload.author,
        directions=payload.directions,
        information=payload.information,
        classifications=parse_classifications(payload.classifications),
        requirements=frozenset(requirements.values()),
        dependencies=frozenset(dependencies.values()),
        tags=frozenset(parse_label_index(tag) for tag in payload.tags),
    )


def parse_ingredient(payload: IngredientPayload) -> Ingredient:
    return Ingredient(
        id=payload.id,
        name=payload.name,
        classifications=parse_classifications(payload.classifications),
        used_in=frozenset(parse_recipe_index(item) for item in payload.used_in),
    )


def parse_label(payload: LabelPayload) -> Label:
    return Label(
        id=payload.id,
        name=payload.name,
        tagged_recipes=frozenset(parse_recipe_index(item) for item in payload.tagged_recipes),
    )

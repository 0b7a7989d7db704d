"""Port for talking to a recipe-management remote."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from larder.domain.model import (
        Classifications,
        Ingredient,
        IngredientIndex,
        Label,
        LabelIndex,
        Recipe,
        RecipeIndex,
        Requirement,
    )


@runtime_checkable
class RemoteGateway(Protocol):
    """Asynchronous access to one remote.

    Every call raises a ``RemoteError`` subclass when the remote cannot satisfy it.
    """

    async def recipe_index(self, pattern: str = "") -> list[RecipeIndex]: ...

    async def recipe_get(self, recipe_id: str) -> Recipe: ...

    async def recipe_create(
        self,
        name: str,
        *,
        author: str = "",
        directions: str = "",
        information: str = "",
    ) -> RecipeIndex: ...

    async def recipe_requirements(self, recipe_id: str) -> list[Requirement]: ...

    async def requirement_create(
        self,
        recipe_id: str,
        ingredient_id: str,
        quantity: str,
        *,
        optional: bool = False,
    ) -> None: ...

    async def requirement_delete(self, recipe_id: str, ingredient_id: str) -> None: ...

    async def dependency_create(
        self,
        recipe_id: str,
        required_id: str,
        *,
        quantity: str = "",
        optional: bool = False,
    ) -> None: ...

    async def recipe_tag(self, recipe_id: str, label_name: str) -> None: ...

    async def ingredient_index(self, pattern: str = "") -> list[IngredientIndex]: ...

    async def ingredient_get(self, ingredient_id: str) -> Ingredient: ...

    async def ingredient_create(self, name: str) -> IngredientIndex: ...

    async def ingredient_update(
        self, ingredient_id: str, classifications: Classifications
    ) -> None: ...

    async def ingredient_delete(self, ingredient_id: str) -> None: ...

    async def label_index(self, pattern: str = "") -> list[LabelIndex]: ...

    async def label_get(self, label_id: str) -> Label: ...

    async def label_create(self, name: str) -> LabelIndex: ...

    async def label_delete(self, label_id: str) -> None: ...


__all__ = ["RemoteGateway"]

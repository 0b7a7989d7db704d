"""Recipe graph entities as exchanged with a remote.

Identity semantics follow the remote: two records are the same entity when their
ids match, regardless of the other fields. Edges (requirements, dependencies)
are identified by the entity they point to, so a recipe holds at most one
requirement per ingredient and one dependency per prerequisite recipe.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RecipeIndex:
    """Lightweight recipe reference."""

    id: str
    name: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class IngredientIndex:
    """Lightweight ingredient reference."""

    id: str
    name: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class LabelIndex:
    """Lightweight label reference."""

    id: str
    name: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class Classifications:
    dairy: bool = False
    meat: bool = False
    gluten: bool = False
    animal_product: bool = False

    @property
    def is_default(self) -> bool:
        return not (self.dairy or self.meat or self.gluten or self.animal_product)

    def terms(self) -> list[str]:
        """Human readable dietary terms, most specific first."""

        terms: list[str] = []
        if self.animal_product and not self.meat:
            terms.append("animal product")
        if self.meat:
            terms.append("meat")
        if self.dairy:
            terms.append("dairy")
        if self.gluten:
            terms.append("gluten")
        return terms


@dataclass(frozen=True, slots=True)
class Requirement:
    ingredient: IngredientIndex
    quantity: str = field(default="", compare=False)
    optional: bool = field(default=False, compare=False)


@dataclass(frozen=True, slots=True)
class Dependency:
    recipe: RecipeIndex
    quantity: str = field(default="", compare=False)
    optional: bool = field(default=False, compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class Recipe:
    id: str
    name: str = field(compare=False)
    author: str = field(default="", compare=False)
    directions: str = field(default="", compare=False)
    information: str = field(default="", compare=False)
    classifications: Classifications = field(default_factory=Classifications, compare=False)
    requirements: frozenset[Requirement] = field(
        default_factory=frozenset["Requirement"], compare=False
    )
    dependencies: frozenset[Dependency] = field(
        default_factory=frozenset["Dependency"], compare=False
    )
    tags: frozenset[LabelIndex] = field(default_factory=frozenset["LabelIndex"], compare=False)

    @property
    def index(self) -> RecipeIndex:
        return RecipeIndex(id=self.id, name=self.name)

    @property
    def dependency_ids(self) -> frozenset[str]:
        return frozenset(dependency.recipe.id for dependency in self.dependencies)


@dataclass(frozen=True, slots=True, kw_only=True)
class Ingredient:
    id: str
    name: str = field(compare=False)
    classifications: Classifications = field(default_factory=Classifications, compare=False)
    # maintained by the remote
    used_in: frozenset[RecipeIndex] = field(
        default_factory=frozenset["RecipeIndex"], compare=False
    )

    @property
    def index(self) -> IngredientIndex:
        return IngredientIndex(id=self.id, name=self.name)


@dataclass(frozen=True, slots=True, kw_only=True)
class Label:
    id: str
    name: str = field(compare=False)
    # maintained by the remote
    tagged_recipes: frozenset[RecipeIndex] = field(
        default_factory=frozenset["RecipeIndex"], compare=False
    )

    @property
    def index(self) -> LabelIndex:
        return LabelIndex(id=self.id, name=self.name)

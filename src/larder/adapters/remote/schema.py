"""Pydantic models describing the recipe server payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class RemoteBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class Envelope(RemoteBaseModel):
    """Wrapper around every answer; older servers spell the flag ``accept``."""

    accepted: bool = Field(validation_alias=AliasChoices("accepted", "accept"))
    error: str = ""
    data: object | None = None

    _normalize_error = field_validator("error", mode="before")(_none_to_blank)


class IndexPayload(RemoteBaseModel):
    id: str
    name: str = ""

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)


class ClassificationsPayload(RemoteBaseModel):
    dairy: bool = False
    meat: bool = False
    gluten: bool = False
    animal_product: bool = False


class RequirementPayload(RemoteBaseModel):
    ingredient: IndexPayload
    quantity: str = ""
    optional: bool = False

    _normalize_quantity = field_validator("quantity", mode="before")(_none_to_blank)


class DependencyPayload(RemoteBaseModel):
    recipe: IndexPayload
    quantity: str = ""
    optional: bool = False

    _normalize_quantity = field_validator("quantity", mode="before")(_none_to_blank)


class RecipePayload(IndexPayload):
    author: str = ""
    directions: str = ""
    information: str = ""
    classifications: ClassificationsPayload = Field(default_factory=ClassificationsPayload)
    requirements: list[RequirementPayload] = Field(default_factory=list["RequirementPayload"])
    dependencies: list[DependencyPayload] = Field(default_factory=list["DependencyPayload"])
    tags: list[IndexPayload] = Field(default_factory=list["IndexPayload"])

    _normalize_text = field_validator("author", "directions", "information", mode="before")(
        _none_to_blank
    )


class IngredientPayload(IndexPayload):
    classifications: ClassificationsPayload = Field(default_factory=ClassificationsPayload)
    used_in: list[IndexPayload] = Field(default_factory=list["IndexPayload"])


class LabelPayload(IndexPayload):
    tagged_recipes: list[IndexPayload] = Field(default_factory=list["IndexPayload"])

from __future__ import annotations

import asyncio
from dataclasses import replace

from larder.domain.maintenance import merge_ingredient
from larder.domain.model import IngredientIndex
from tests.support.remote import FakeRemote

SCALLION = IngredientIndex(id="i-scallion", name="scallion")
GREEN_ONION = IngredientIndex(id="i-green", name="green onion")


def _duplicates() -> FakeRemote:
    remote = FakeRemote()
    scallion = remote.add_ingredient("scallion", id="i-scallion")
    onion = remote.add_ingredient("green onion", id="i-green")
    ginger = remote.add_ingredient("ginger", id="i-ginger")
    remote.add_recipe("Fried rice", id="r1", requires=[(onion, "2 stalks")])
    remote.add_recipe("Noodles", id="r2", requires=[(onion, "1 stalk"), (ginger, "1 knob")])
    remote.add_recipe("Pancakes", id="r3", requires=[(scallion, "4"), (onion, "2")])
    return remote


def test_merge_moves_requirements_and_deletes_obsolete() -> None:
    remote = _duplicates()

    report = asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    assert report.succeeded
    assert report.obsolete_deleted
    assert sorted(item.id for item in report.moved) == ["r1", "r2", "r3"]
    assert "i-green" not in remote.ingredients
    for recipe in remote.recipes.values():
        assert "i-green" not in recipe.requirements
        assert "i-scallion" in recipe.requirements
    assert remote.recipes["r1"].requirements["i-scallion"].quantity == "2 stalks"
    assert "i-ginger" in remote.recipes["r2"].requirements


def test_merge_keeps_existing_target_quantity() -> None:
    remote = _duplicates()

    report = asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    assert remote.recipes["r3"].requirements["i-scallion"].quantity == "4"
    assert any("already requires" in warning for warning in report.warnings)
    assert ("r3", "i-scallion", "2") not in remote.called("requirement_create")


def test_merge_creates_before_deleting_per_recipe() -> None:
    remote = _duplicates()

    asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION, limit=1))

    edits = [
        (name, args[0])
        for name, args in remote.calls
        if name in {"requirement_create", "requirement_delete"}
    ]
    for recipe_id in ("r1", "r2"):
        assert edits.index(("requirement_create", recipe_id)) < edits.index(
            ("requirement_delete", recipe_id)
        )


def test_merge_keeps_obsolete_when_a_move_fails() -> None:
    remote = _duplicates()
    remote.fail_on("requirement_create", "r2")

    report = asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    assert not report.succeeded
    assert not report.obsolete_deleted
    assert "i-green" in remote.ingredients
    assert "i-green" in remote.recipes["r2"].requirements
    assert "i-scallion" not in remote.recipes["r2"].requirements
    assert sorted(item.id for item in report.moved) == ["r1", "r3"]
    assert remote.called("ingredient_delete") == []


def test_merge_rerun_completes_after_failure() -> None:
    remote = _duplicates()
    remote.fail_on("requirement_create", "r2")
    asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    remote.clear_failures()
    report = asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    assert report.succeeded
    assert report.obsolete_deleted
    assert [item.id for item in report.moved] == ["r2"]


def test_merge_into_itself_is_refused() -> None:
    remote = _duplicates()

    report = asyncio.run(merge_ingredient(remote, GREEN_ONION, GREEN_ONION))

    assert not report.succeeded
    assert remote.calls == []


def test_merge_of_unused_ingredient_just_deletes_it() -> None:
    remote = _duplicates()
    remote.add_ingredient("galangal", id="i-galangal")
    target = IngredientIndex(id="i-ginger", name="ginger")
    spare = IngredientIndex(id="i-galangal", name="galangal")

    report = asyncio.run(merge_ingredient(remote, target, spare))

    assert report.succeeded
    assert report.moved == []
    assert "i-galangal" not in remote.ingredients



def test_merge_moves_optional_requirements_as_required() -> None:
    remote = _duplicates()
    garnish = remote.recipes["r1"].requirements["i-green"]
    remote.recipes["r1"].requirements["i-green"] = replace(garnish, optional=True)

    report = asyncio.run(merge_ingredient(remote, SCALLION, GREEN_ONION))

    assert report.succeeded
    moved = remote.recipes["r1"].requirements["i-scallion"]
    assert moved.quantity == "2 stalks"
    assert not moved.optional

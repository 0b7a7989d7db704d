from __future__ import annotations

import asyncio

from larder.domain.maintenance import clean_remote
from tests.support.remote import FakeRemote


def _pantry() -> FakeRemote:
    remote = FakeRemote()
    rice = remote.add_ingredient("rice", id="i-rice")
    remote.add_ingredient("saffron", id="i-saffron")
    remote.add_ingredient("truffle", id="i-truffle")
    spicy = remote.add_label("spicy", id="l-spicy")
    remote.add_label("retired", id="l-retired")
    remote.add_recipe("Risotto", requires=[(rice, "300g")], tags=[spicy])
    return remote


def test_clean_deletes_only_unused_entities() -> None:
    remote = _pantry()

    report = asyncio.run(clean_remote(remote))

    assert report.succeeded
    assert sorted(item.id for item in report.deleted_ingredients) == ["i-saffron", "i-truffle"]
    assert [item.id for item in report.deleted_labels] == ["l-retired"]
    assert set(remote.ingredients) == {"i-rice"}
    assert set(remote.labels) == {"l-spicy"}


def test_clean_leaves_entities_it_could_not_inspect() -> None:
    remote = _pantry()
    remote.fail_on("ingredient_get", "i-saffron")

    report = asyncio.run(clean_remote(remote))

    assert report.succeeded
    assert "i-saffron" in remote.ingredients
    assert "i-truffle" not in remote.ingredients
    assert len(report.warnings) == 1


def test_clean_records_failed_deletions() -> None:
    remote = _pantry()
    remote.fail_on("label_delete", "l-retired")

    report = asyncio.run(clean_remote(remote))

    assert report.succeeded
    assert report.deleted_labels == []
    assert len(report.failures) == 1


def test_clean_runs_label_pass_when_ingredient_listing_fails() -> None:
    remote = _pantry()
    remote.fail_on("ingredient_index")

    report = asyncio.run(clean_remote(remote))

    assert not report.succeeded
    assert report.deleted_ingredients == []
    assert [item.id for item in report.deleted_labels] == ["l-retired"]


def test_clean_on_tidy_remote_is_a_no_op() -> None:
    remote = FakeRemote()
    salt = remote.add_ingredient("salt")
    remote.add_recipe("Brine", requires=[(salt, "1 tbsp")])

    report = asyncio.run(clean_remote(remote))

    assert report.succeeded
    assert remote.called("ingredient_delete") == []
    assert remote.called("label_delete") == []

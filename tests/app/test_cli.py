from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from larder.config import MissingConfigurationError
from larder.domain.errors import IdentificationError
from larder.domain.maintenance import CleanReport, DumpDocument, DumpReport, MergeReport
from larder.domain.model import EntityKind, Ingredient
from larder.ui import cli

if TYPE_CHECKING:
    from pathlib import Path


def _document() -> DumpDocument:
    return DumpDocument(
        ingredients=(Ingredient(id="__ingredient_0", name="Crème"),),
        labels=(),
        recipes=(),
    )


def test_dump_writes_json_to_stdout(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_dump(remote: str | None, **kwargs: object) -> DumpReport:
        captured["remote"] = remote
        captured.update(kwargs)
        return DumpReport(document=_document())

    monkeypatch.setattr(cli, "dump_remote", fake_dump)

    cli.main(["-r", "http://kitchen.test", "--max-in-flight", "3", "dump"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["ingredients"][0]["name"] == "Crème"
    assert captured == {"remote": "http://kitchen.test", "max_in_flight": 3}


def test_dump_writes_json_to_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "dump_remote", lambda *_, **__: DumpReport(document=_document()))
    target = tmp_path / "dump.json"

    cli.main(["dump", "-o", str(target)])

    assert json.loads(target.read_text(encoding="utf-8"))["version"] == 1


def test_merge_passes_clues(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[object] = []

    def fake_merge(*args: object, **_: object) -> MergeReport:
        captured.extend(args)
        return MergeReport(obsolete_deleted=True)

    monkeypatch.setattr(cli, "merge_ingredients", fake_merge)

    cli.main(["merge", "scallion", "green onion"])

    assert captured == [None, "scallion", "green onion"]


def test_failed_run_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli, "clean_remote", lambda *_, **__: CleanReport(fatal="Could not list ingredients")
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["clean"])

    assert excinfo.value.code == 1


def test_configuration_error_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_clone(*_: object, **__: object) -> None:
        raise MissingConfigurationError("No remote given")

    monkeypatch.setattr(cli, "clone_remote", fake_clone)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["clone", "http://destination.test"])

    assert excinfo.value.code == 2


def test_identification_error_exits_with_two(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def fake_merge(*_: object, **__: object) -> None:
        raise IdentificationError("onion", EntityKind.INGREDIENT, ["green onion", "red onion"])

    monkeypatch.setattr(cli, "merge_ingredients", fake_merge)

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as excinfo:
        cli.main(["merge", "scallion", "onion"])

    assert excinfo.value.code == 2
    assert "'red onion'" in caplog.text


def test_unexpected_error_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_clean(*_: object, **__: object) -> None:
        raise RuntimeError("kaboom")

    monkeypatch.setattr(cli, "clean_remote", fake_clean)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["clean"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "argv",
    [[], ["merge", "only-one"], ["--max-in-flight", "0", "clean"], ["frobnicate"]],
)
def test_usage_errors_exit_with_two(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2

from __future__ import annotations

import pytest

from tests.support.remote import FakeRemote


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture(autouse=True)
def _isolated_configuration(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    monkeypatch.delenv("LARDER_REMOTE", raising=False)
    monkeypatch.delenv("LARDER_MAX_IN_FLIGHT", raising=False)
    monkeypatch.delenv("LARDER_RATE_LIMIT", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("config")))

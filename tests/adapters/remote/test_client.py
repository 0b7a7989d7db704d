from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable  # noqa: TC003
from urllib.parse import parse_qs

import httpx
import pytest

from larder.adapters.http_resilience import ResilienceConfig, ResilientClient
from larder.adapters.remote import RemoteClient
from larder.config import RemoteConfig
from larder.domain.errors import (
    RemoteRejectedError,
    RemoteResponseError,
    RemoteTransportError,
)
from larder.domain.model import Classifications

BASE_URL = "http://kitchen.test/api"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def _remote(handler: Callable[[httpx.Request], httpx.Response]) -> RemoteClient:
    config = RemoteConfig(
        base_url=BASE_URL,
        resilience=ResilienceConfig(name="larder", base_url=BASE_URL),
    )
    return RemoteClient(config, client_factory=_make_client_factory(handler))


def _answer(data: object = None, *, accepted: bool = True, error: str = "") -> httpx.Response:
    return httpx.Response(200, json={"accepted": accepted, "error": error, "data": data})


def _run[T](
    handler: Callable[[httpx.Request], httpx.Response],
    call: Callable[[RemoteClient], Awaitable[T]],
) -> T:
    async def scenario() -> T:
        async with _remote(handler) as remote:
            return await call(remote)

    return asyncio.run(scenario())


def _form(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def test_recipe_get_parses_nested_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer(
            {
                "id": 12,
                "name": "Pie",
                "author": None,
                "classifications": {
                    "dairy": True,
                    "meat": False,
                    "gluten": True,
                    "animal_product": True,
                },
                "requirements": [
                    {"ingredient": {"id": "3", "name": "apple"}, "quantity": "4"},
                    {"ingredient": {"id": "3", "name": "apple"}, "quantity": "9"},
                ],
                "dependencies": [{"recipe": {"id": "7", "name": "Crust"}, "quantity": "1"}],
                "tags": [{"id": "1", "name": "dessert"}],
            }
        )

    recipe = _run(handler, lambda remote: remote.recipe_get("12"))

    assert str(seen[0].url) == f"{BASE_URL}/recipes/12"
    assert recipe.id == "12"
    assert recipe.author == ""
    assert recipe.classifications.gluten
    assert [(item.ingredient.id, item.quantity) for item in recipe.requirements] == [("3", "4")]
    assert recipe.dependency_ids == frozenset({"7"})
    assert {tag.name for tag in recipe.tags} == {"dessert"}


def test_index_sends_name_pattern() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer([{"id": "1", "name": "Tomato"}, {"id": "2", "name": "Cherry tomato"}])

    found = _run(handler, lambda remote: remote.ingredient_index("tom"))

    assert seen[0].url.path == "/api/ingredients"
    assert seen[0].url.params["name"] == "tom"
    assert [item.name for item in found] == ["Tomato", "Cherry tomato"]


def test_older_accept_flag_is_understood() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"accept": True, "data": [{"id": "5", "name": "x"}]})

    found = _run(handler, lambda remote: remote.label_index())

    assert [item.id for item in found] == ["5"]


def test_recipe_create_posts_form_fields() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer({"id": "40", "name": "Soup"})

    created = _run(
        handler, lambda remote: remote.recipe_create("Soup", author="Ann", directions="Boil")
    )

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/recipes/new"
    assert _form(seen[0]) == {"name": "Soup", "author": "Ann", "directions": "Boil"}
    assert created.id == "40"


def test_requirement_and_dependency_edges_use_recipe_paths() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer()

    async def edit(remote: RemoteClient) -> None:
        await remote.requirement_create("r1", "i1", "2 cups", optional=True)
        await remote.dependency_create("r1", "r0", quantity="1")
        await remote.recipe_tag("r1", "quick")
        await remote.requirement_delete("r1", "i1")

    _run(handler, edit)

    assert [(request.method, request.url.path) for request in seen] == [
        ("POST", "/api/recipes/r1/requirements/add"),
        ("POST", "/api/recipes/r1/dependencies/add"),
        ("POST", "/api/recipes/r1/tags/add"),
        ("DELETE", "/api/recipes/r1/requirements/i1"),
    ]
    assert _form(seen[0]) == {"ingredient_id": "i1", "quantity": "2 cups", "optional": "true"}
    assert _form(seen[1]) == {"required_id": "r0", "quantity": "1", "optional": "false"}
    assert _form(seen[2]) == {"name": "quick"}


def test_ingredient_update_puts_classification_flags() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer()

    meat = Classifications(meat=True, animal_product=True)

    _run(handler, lambda remote: remote.ingredient_update("i9", meat))

    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/api/ingredients/i9"
    assert _form(seen[0]) == {
        "dairy": "false",
        "meat": "true",
        "gluten": "false",
        "animal_product": "true",
    }


def test_ids_are_escaped_in_paths() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer()

    _run(handler, lambda remote: remote.label_delete("a/b"))

    assert seen[0].url.raw_path == b"/api/labels/a%2Fb"


def test_rejected_answer_carries_server_message() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return _answer(accepted=False, error="Ingredient is still in use")

    with pytest.raises(RemoteRejectedError) as excinfo:
        _run(handler, lambda remote: remote.ingredient_delete("i1"))

    assert excinfo.value.reason == "Ingredient is still in use"
    assert excinfo.value.endpoint == "/ingredients/i1"
    assert str(excinfo.value) == "Server returned an error: Ingredient is still in use"


def test_missing_data_is_a_response_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return _answer(None)

    with pytest.raises(RemoteResponseError):
        _run(handler, lambda remote: remote.recipe_get("1"))


def test_missing_data_is_fine_for_commands() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return _answer(None)

    assert _run(handler, lambda remote: remote.label_delete("1")) is None


def test_invalid_json_is_a_response_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(RemoteResponseError):
        _run(handler, lambda remote: remote.recipe_index())


def test_schema_mismatch_is_a_response_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return _answer({"name": "no id"})

    with pytest.raises(RemoteResponseError):
        _run(handler, lambda remote: remote.ingredient_get("1"))


def test_http_status_errors_are_transport_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text=json.dumps({"detail": "not here"}))

    with pytest.raises(RemoteTransportError):
        _run(handler, lambda remote: remote.label_get("1"))


def test_network_errors_are_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RemoteTransportError):
        _run(handler, lambda remote: remote.recipe_index())


def test_client_must_be_entered() -> None:
    remote = _remote(lambda _: _answer())

    with pytest.raises(RuntimeError, match="async with"):
        asyncio.run(remote.recipe_index())

"""HTTP client for a recipe server."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from larder.adapters.http_resilience import ResilienceConfig, ResilientClient
from larder.domain.errors import RemoteRejectedError, RemoteResponseError, RemoteTransportError

from .schema import (
    Envelope,
    IndexPayload,
    IngredientPayload,
    LabelPayload,
    RecipePayload,
    RequirementPayload,
)
from .translator import (
    parse_ingredient,
    parse_ingredient_index,
    parse_label,
    parse_label_index,
    parse_recipe,
    parse_recipe_index,
    parse_requirement,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from larder.config import RemoteConfig
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
    from larder.domain.ports import RemoteGateway

log = getLogger(__name__)

type FormData = dict[str, str]

_INDEX_LIST = TypeAdapter(list[IndexPayload])
_INDEX = TypeAdapter(IndexPayload)
_RECIPE = TypeAdapter(RecipePayload)
_INGREDIENT = TypeAdapter(IngredientPayload)
_LABEL = TypeAdapter(LabelPayload)
_REQUIREMENT_LIST = TypeAdapter(list[RequirementPayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _flag(value: bool) -> str:
    return "true" if value else "false"


class RemoteClient:
    """Recipe server gateway over HTTP.

    Use as an async context manager; the underlying connection pool lives for
    the duration of the ``async with`` block.
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        self._client: ResilientClient | None = None

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def __aenter__(self) -> RemoteClient:
        self._client = self._client_factory(self.config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # recipes

    async def recipe_index(self, pattern: str = "") -> list[RecipeIndex]:
        envelope = await self._request("GET", "/recipes", params={"name": pattern})
        payloads = self._unwrap(envelope, _INDEX_LIST, "/recipes")
        return [parse_recipe_index(item) for item in payloads]

    async def recipe_get(self, recipe_id: str) -> Recipe:
        path = f"/recipes/{_segment(recipe_id)}"
        envelope = await self._request("GET", path)
        return parse_recipe(self._unwrap(envelope, _RECIPE, path))

    async def recipe_create(
        self,
        name: str,
        *,
        author: str = "",
        directions: str = "",
        information: str = "",
    ) -> RecipeIndex:
        path = "/recipes/new"
        form = {
            "name": name,
            "author": author,
            "directions": directions,
            "information": information,
        }
        envelope = await self._request("POST", path, data=form)
        return parse_recipe_index(self._unwrap(envelope, _INDEX, path))

    async def recipe_requirements(self, recipe_id: str) -> list[Requirement]:
        path = f"/recipes/{_segment(recipe_id)}/requirements"
        envelope = await self._request("GET", path)
        return [parse_requirement(item) for item in self._unwrap(envelope, _REQUIREMENT_LIST, path)]

    async def requirement_create(
        self,
        recipe_id: str,
        ingredient_id: str,
        quantity: str,
        *,
        optional: bool = False,
    ) -> None:
        form = {"ingredient_id": ingredient_id, "quantity": quantity, "optional": _flag(optional)}
        await self._request(
            "POST", f"/recipes/{_segment(recipe_id)}/requirements/add", data=form
        )

    async def requirement_delete(self, recipe_id: str, ingredient_id: str) -> None:
        await self._request(
            "DELETE", f"/recipes/{_segment(recipe_id)}/requirements/{_segment(ingredient_id)}"
        )

    async def dependency_create(
        self,
        recipe_id: str,
        required_id: str,
        *,
        quantity: str = "",
        optional: bool = False,
    ) -> None:
        form = {"required_id": required_id, "quantity": quantity, "optional": _flag(optional)}
        await self._request(
            "POST", f"/recipes/{_segment(recipe_id)}/dependencies/add", data=form
        )

    async def recipe_tag(self, recipe_id: str, label_name: str) -> None:
        await self._request(
            "POST", f"/recipes/{_segment(recipe_id)}/tags/add", data={"name": label_name}
        )

    # ingredients

    async def ingredient_index(self, pattern: str = "") -> list[IngredientIndex]:
        envelope = await self._request("GET", "/ingredients", params={"name": pattern})
        payloads = self._unwrap(envelope, _INDEX_LIST, "/ingredients")
        return [parse_ingredient_index(item) for item in payloads]

    async def ingredient_get(self, ingredient_id: str) -> Ingredient:
        path = f"/ingredients/{_segment(ingredient_id)}"
        envelope = await self._request("GET", path)
        return parse_ingredient(self._unwrap(envelope, _INGREDIENT, path))

    async def ingredient_create(self, name: str) -> IngredientIndex:
        path = "/ingredients/new"
        envelope = await self._request("POST", path, data={"name": name})
        return parse_ingredient_index(self._unwrap(envelope, _INDEX, path))

    async def ingredient_update(
        self, ingredient_id: str, classifications: Classifications
    ) -> None:
        form = {
            "dairy": _flag(classifications.dairy),
            "meat": _flag(classifications.meat),
            "gluten": _flag(classifications.gluten),
            "animal_product": _flag(classifications.animal_product),
        }
        await self._request("PUT", f"/ingredients/{_segment(ingredient_id)}", data=form)

    async def ingredient_delete(self, ingredient_id: str) -> None:
        await self._request("DELETE", f"/ingredients/{_segment(ingredient_id)}")

    # labels

    async def label_index(self, pattern: str = "") -> list[LabelIndex]:
        envelope = await self._request("GET", "/labels", params={"name": pattern})
        payloads = self._unwrap(envelope, _INDEX_LIST, "/labels")
        return [parse_label_index(item) for item in payloads]

    async def label_get(self, label_id: str) -> Label:
        path = f"/labels/{_segment(label_id)}"
        envelope = await self._request("GET", path)
        return parse_label(self._unwrap(envelope, _LABEL, path))

    async def label_create(self, name: str) -> LabelIndex:
        path = "/labels/new"
        envelope = await self._request("POST", path, data={"name": name})
        return parse_label_index(self._unwrap(envelope, _INDEX, path))

    async def label_delete(self, label_id: str) -> None:
        await self._request("DELETE", f"/labels/{_segment(label_id)}")

    # plumbing

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        data: FormData | None = None,
    ) -> Envelope:
        if self._client is None:
            raise RuntimeError("RemoteClient must be used inside 'async with'")

        url = f"{self.base_url}{path}"
        log.debug("%s %s %s", method, url, data if data is not None else params or "")
        try:
            response = await self._client.request(method, url, params=params, data=data)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RemoteTransportError(f"{method} {path} failed: {exc}") from exc

        try:
            envelope = Envelope.model_validate_json(response.content)
        except ValidationError as exc:
            raise RemoteResponseError(
                f"Failed to interpret the server's response to {method} {path}"
            ) from exc

        if not envelope.accepted:
            log.debug("%s %s rejected: %s", method, path, envelope.error)
            raise RemoteRejectedError(envelope.error, endpoint=path)
        return envelope

    @staticmethod
    def _unwrap[TPayload](
        envelope: Envelope, adapter: TypeAdapter[TPayload], path: str
    ) -> TPayload:
        if envelope.data is None:
            raise RemoteResponseError(f"Server sent no data for {path}")
        try:
            return adapter.validate_python(envelope.data)
        except ValidationError as exc:
            raise RemoteResponseError(f"Unexpected payload for {path}: {exc}") from exc


if TYPE_CHECKING:

    def _gateway_check(client: RemoteClient) -> RemoteGateway:
        return client

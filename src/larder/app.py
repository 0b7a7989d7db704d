"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from logging import getLogger
from typing import TYPE_CHECKING

from larder.adapters.remote import RemoteClient
from larder.config import ConfigurationError, RemoteConfig, get_remote_config
from larder.domain import maintenance
from larder.domain.model import EntityKind, IngredientIndex
from larder.domain.ports import RemoteGateway
from larder.domain.resolve import finder_for, identify

if TYPE_CHECKING:
    from larder.domain.maintenance import CleanReport, CloneReport, DumpReport, MergeReport

type RemoteFactory = Callable[[RemoteConfig], AbstractAsyncContextManager[RemoteGateway]]

log = getLogger(__name__)


def _http_remote(config: RemoteConfig) -> AbstractAsyncContextManager[RemoteGateway]:
    return RemoteClient(config)


def clone_remote(
    source: str | None,
    destination: str,
    *,
    remote_factory: RemoteFactory = _http_remote,
    max_in_flight: int | None = None,
) -> CloneReport:
    """Copy the recipe graph of ``source`` onto ``destination``."""

    source_config = get_remote_config(source, read_only=True)
    destination_config = get_remote_config(destination)
    if source_config.base_url == destination_config.base_url:
        raise ConfigurationError(f"Refusing to clone {source_config.base_url} onto itself")
    limit = max_in_flight or destination_config.max_in_flight
    log.info("Cloning %s onto %s", source_config.base_url, destination_config.base_url)

    async def run() -> CloneReport:
        async with (
            remote_factory(source_config) as source_remote,
            remote_factory(destination_config) as destination_remote,
        ):
            return await maintenance.clone_graph(source_remote, destination_remote, limit=limit)

    return asyncio.run(run())


def dump_remote(
    source: str | None,
    *,
    remote_factory: RemoteFactory = _http_remote,
    max_in_flight: int | None = None,
) -> DumpReport:
    config = get_remote_config(source, read_only=True)
    limit = max_in_flight or config.max_in_flight
    log.info("Dumping %s", config.base_url)

    async def run() -> DumpReport:
        async with remote_factory(config) as remote:
            return await maintenance.dump_graph(remote, limit=limit)

    return asyncio.run(run())


def clean_remote(
    remote_url: str | None,
    *,
    remote_factory: RemoteFactory = _http_remote,
    max_in_flight: int | None = None,
) -> CleanReport:
    config = get_remote_config(remote_url)
    limit = max_in_flight or config.max_in_flight
    log.info("Cleaning %s", config.base_url)

    async def run() -> CleanReport:
        async with remote_factory(config) as remote:
            return await maintenance.clean_remote(remote, limit=limit)

    return asyncio.run(run())


def merge_ingredients(
    remote_url: str | None,
    target_clue: str,
    obsolete_clue: str,
    *,
    remote_factory: RemoteFactory = _http_remote,
    max_in_flight: int | None = None,
) -> MergeReport:
    """Fold the ingredient matching ``obsolete_clue`` into the one matching ``target_clue``.

    Both clues must identify exactly one ingredient; ``IdentificationError`` is
    raised before anything is modified otherwise.
    """

    config = get_remote_config(remote_url)
    limit = max_in_flight or config.max_in_flight

    async def run() -> MergeReport:
        async with remote_factory(config) as remote:
            finder = finder_for(remote, EntityKind.INGREDIENT)
            target = await identify(finder, target_clue)
            obsolete = await identify(finder, obsolete_clue)
            log.info("Merging %r into %r on %s", obsolete.name, target.name, config.base_url)
            return await maintenance.merge_ingredient(
                remote,
                IngredientIndex(id=target.id, name=target.name),
                IngredientIndex(id=obsolete.id, name=obsolete.name),
                limit=limit,
            )

    return asyncio.run(run())

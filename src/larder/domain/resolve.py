"""Identify entities from free-form clues.

A clue is whatever the user typed: an id, an exact name, or a name pattern.
Matching policy:
- the clue is an existing id -> ``ExactMatch``
- the name pattern matches one entity -> ``UniqueFuzzyMatch``
- several matches, one named exactly like the clue -> ``ExactMatch``
- several matches otherwise -> ``AmbiguousCandidates``
- nothing -> ``NoMatch``

``match_clue`` never mutates the remote. ``identify`` turns the outcome into a
reference, creating the entity only when explicitly asked to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol

from larder.domain.errors import IdentificationError, RemoteError
from larder.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from larder.domain.model import EntityIndex
    from larder.domain.ports import RemoteGateway

log = logging.getLogger(__name__)


class EntityFinder(Protocol):
    """Per-kind capabilities needed to identify an entity."""

    kind: EntityKind

    async def get_by_id(self, entity_id: str) -> EntityIndex: ...

    async def list_by_pattern(self, pattern: str) -> list[EntityIndex]: ...

    async def create(self, name: str) -> EntityIndex: ...


@dataclass(frozen=True, slots=True)
class GatewayFinder:
    """``EntityFinder`` backed by the gateway calls of one entity kind."""

    kind: EntityKind
    _get: Callable[[str], Awaitable[EntityIndex]]
    _list: Callable[[str], Awaitable[list[EntityIndex]]]
    _create: Callable[[str], Awaitable[EntityIndex]]

    async def get_by_id(self, entity_id: str) -> EntityIndex:
        return await self._get(entity_id)

    async def list_by_pattern(self, pattern: str) -> list[EntityIndex]:
        return await self._list(pattern)

    async def create(self, name: str) -> EntityIndex:
        return await self._create(name)


def finder_for(remote: RemoteGateway, kind: EntityKind) -> GatewayFinder:
    """Bind the gateway calls matching ``kind``."""

    if kind is EntityKind.RECIPE:

        async def get_recipe(entity_id: str) -> EntityIndex:
            return (await remote.recipe_get(entity_id)).index

        async def list_recipes(pattern: str) -> list[EntityIndex]:
            return list(await remote.recipe_index(pattern))

        async def create_recipe(name: str) -> EntityIndex:
            return await remote.recipe_create(name)

        return GatewayFinder(kind, get_recipe, list_recipes, create_recipe)

    if kind is EntityKind.INGREDIENT:

        async def get_ingredient(entity_id: str) -> EntityIndex:
            return (await remote.ingredient_get(entity_id)).index

        async def list_ingredients(pattern: str) -> list[EntityIndex]:
            return list(await remote.ingredient_index(pattern))

        return GatewayFinder(kind, get_ingredient, list_ingredients, remote.ingredient_create)

    async def get_label(entity_id: str) -> EntityIndex:
        return (await remote.label_get(entity_id)).index

    async def list_labels(pattern: str) -> list[EntityIndex]:
        return list(await remote.label_index(pattern))

    return GatewayFinder(kind, get_label, list_labels, remote.label_create)


class MatchStatus(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


@dataclass(frozen=True, slots=True, kw_only=True)
class ExactMatch:
    """Clue is the entity's id, or the exact name among several candidates."""

    target: EntityIndex
    by_id: bool
    status: Literal[MatchStatus.EXACT] = MatchStatus.EXACT


@dataclass(frozen=True, slots=True, kw_only=True)
class UniqueFuzzyMatch:
    """Name pattern matched exactly one entity."""

    target: EntityIndex
    status: Literal[MatchStatus.FUZZY] = MatchStatus.FUZZY


@dataclass(frozen=True, slots=True, kw_only=True)
class AmbiguousCandidates:
    candidates: tuple[EntityIndex, ...]
    status: Literal[MatchStatus.AMBIGUOUS] = MatchStatus.AMBIGUOUS

    def __post_init__(self) -> None:
        if len(self.candidates) < 2:  # noqa: PLR2004
            raise ValueError("Ambiguous match needs at least two candidates")


@dataclass(frozen=True, slots=True, kw_only=True)
class NoMatch:
    status: Literal[MatchStatus.NONE] = MatchStatus.NONE


type ClueMatch = ExactMatch | UniqueFuzzyMatch | AmbiguousCandidates | NoMatch


async def match_clue(finder: EntityFinder, clue: str) -> ClueMatch:
    """Classify ``clue`` against the entities ``finder`` can see."""

    try:
        target = await finder.get_by_id(clue)
    except RemoteError as exc:
        log.debug("No %s with id %r: %s", finder.kind, clue, exc)
    else:
        return ExactMatch(target=target, by_id=True)

    candidates = _dedupe(await finder.list_by_pattern(clue))
    if not candidates:
        return NoMatch()
    if len(candidates) == 1:
        return UniqueFuzzyMatch(target=candidates[0])

    exact = [candidate for candidate in candidates if candidate.name == clue]
    if len(exact) == 1:
        return ExactMatch(target=exact[0], by_id=False)
    return AmbiguousCandidates(candidates=tuple(candidates))


async def identify(
    finder: EntityFinder,
    clue: str,
    *,
    create_if_missing: bool = False,
) -> EntityIndex:
    """Resolve ``clue`` to one entity or raise ``IdentificationError``."""

    match = await match_clue(finder, clue)
    if isinstance(match, ExactMatch):
        return match.target
    if isinstance(match, UniqueFuzzyMatch):
        if match.target.name != clue:
            log.info("Using %s %r for clue %r", finder.kind, match.target.name, clue)
        return match.target

    if create_if_missing:
        created = await finder.create(clue)
        log.info("Created %s %r (%s)", finder.kind, clue, created.id)
        return created

    if isinstance(match, AmbiguousCandidates):
        raise IdentificationError(
            clue,
            finder.kind,
            candidates=[candidate.name for candidate in match.candidates],
        )
    raise IdentificationError(clue, finder.kind)


def _dedupe(candidates: list[EntityIndex]) -> list[EntityIndex]:
    seen: set[str] = set()
    deduped: list[EntityIndex] = []
    for candidate in candidates:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        deduped.append(candidate)
    return deduped

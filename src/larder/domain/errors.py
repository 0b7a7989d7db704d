"""Error taxonomy shared by the domain and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from larder.domain.model import EntityKind


class LarderError(RuntimeError):
    """Base class for errors raised by larder."""


class RemoteError(LarderError):
    """A remote call did not produce a usable answer."""


class RemoteTransportError(RemoteError):
    """The request never produced a well-formed answer (network, HTTP status)."""


class RemoteRejectedError(RemoteError):
    """The remote answered but refused the request."""

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        super().__init__(f"Server returned an error: {message}")
        self.reason = message
        self.endpoint = endpoint


class RemoteResponseError(RemoteError):
    """The remote accepted the request but its payload could not be interpreted."""


class IdentificationError(LarderError):
    """A clue matched zero or several entities."""

    def __init__(self, clue: str, kind: EntityKind, candidates: Iterable[str] = ()) -> None:
        self.clue = clue
        self.kind = kind
        self.candidates = tuple(candidates)
        if self.candidates:
            listing = ", ".join(repr(name) for name in self.candidates)
            message = f"Clue {clue!r} is ambiguous for {kind}: candidates are {listing}"
        else:
            message = f"No {kind} matches clue {clue!r}"
        super().__init__(message)


class CycleError(LarderError, ValueError):
    """Recipe dependencies loop back on themselves."""

    def __init__(self, recipe_ids: Iterable[str]) -> None:
        self.recipe_ids = tuple(sorted(recipe_ids))
        super().__init__(
            "Recipe dependency cycle among: " + ", ".join(self.recipe_ids)
        )

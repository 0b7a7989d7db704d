"""Run reports: the warning side channel of maintenance operations.

Every message recorded on a report is also logged through the caller's logger,
so the CLI shows progress as it happens while callers can still inspect the
outcome afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from logging import Logger

    from larder.domain.model import IngredientIndex, LabelIndex, RecipeIndex

    from .dump import DumpDocument


@dataclass(slots=True, kw_only=True)
class RunReport:
    """Outcome of one maintenance run.

    ``warnings`` hold dropped references and skipped items, ``failures`` hold
    per-item operations that did not go through. ``fatal`` is set when a gating
    step failed; only then is the run unsuccessful.
    """

    warnings: list[str] = field(default_factory=list[str])
    failures: list[str] = field(default_factory=list[str])
    fatal: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.fatal is None

    def warning(self, logger: Logger, message: str, *args: object) -> None:
        logger.warning(message, *args)
        self.warnings.append(message % args if args else message)

    def failure(self, logger: Logger, message: str, *args: object) -> None:
        logger.error(message, *args)
        self.failures.append(message % args if args else message)

    def abort(self, logger: Logger, message: str, *args: object) -> None:
        logger.error(message, *args)
        self.fatal = message % args if args else message


@dataclass(slots=True, kw_only=True)
class CloneReport(RunReport):
    fetched_recipes: int = 0
    created_recipes: list[RecipeIndex] = field(default_factory=list["RecipeIndex"])
    created_ingredients: int = 0


@dataclass(slots=True, kw_only=True)
class DumpReport(RunReport):
    document: DumpDocument | None = None


@dataclass(slots=True, kw_only=True)
class CleanReport(RunReport):
    deleted_ingredients: list[IngredientIndex] = field(default_factory=list["IngredientIndex"])
    deleted_labels: list[LabelIndex] = field(default_factory=list["LabelIndex"])


@dataclass(slots=True, kw_only=True)
class MergeReport(RunReport):
    moved: list[RecipeIndex] = field(default_factory=list["RecipeIndex"])
    obsolete_deleted: bool = False

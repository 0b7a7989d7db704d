"""Whole-graph maintenance operations: clone, dump, clean and merge."""

from __future__ import annotations

from .clean import clean_remote
from .clone import clone_graph
from .dump import DumpDocument, dump_graph
from .merge import merge_ingredient
from .report import CleanReport, CloneReport, DumpReport, MergeReport, RunReport

__all__ = [
    "CleanReport",
    "CloneReport",
    "DumpDocument",
    "DumpReport",
    "MergeReport",
    "RunReport",
    "clean_remote",
    "clone_graph",
    "dump_graph",
    "merge_ingredient",
]

"""
Annotation pipeline.

Runs the full scan -> resolve -> build sequence over a document, one text
unit at a time, against a single MergedTable snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from ..catalog import MergedTable
from ..rules_ast import EMPTY_RULES, RuleSet
from .builder import build
from .core import AnnotationSegment, RawMatch
from .overlap_resolver import OverlapResolver
from .scanner import compile_table, scan_compiled

logger = logging.getLogger(__name__)

UNIT_MODES = ("document", "line")


@dataclass(frozen=True)
class Annotation:
    """Result of annotating one document."""

    text: str
    raw_matches: Tuple[RawMatch, ...]
    matches: Tuple[RawMatch, ...]
    segments: Tuple[AnnotationSegment, ...]


def iter_text_units(text: str, mode: str = "document") -> Iterator[Tuple[int, str]]:
    """
    Yield (offset, unit) pairs covering ``text``.

    Whitespace-only units are skipped since they can never hold a match.
    """
    if mode not in UNIT_MODES:
        raise ValueError(f"Unknown text unit mode: {mode}")
    if mode == "document":
        units = [text]
    else:
        units = text.splitlines(keepends=True)
    offset = 0
    for unit in units:
        if unit.strip():
            yield offset, unit
        offset += len(unit)


class Annotator:
    """
    Annotates text against one MergedTable.

    Patterns are compiled once when the annotator is created. After a table
    reload, create a new Annotator for the new table.
    """

    def __init__(self, table: MergedTable, rules: RuleSet = EMPTY_RULES):
        self.table = table
        self.rules = rules
        self.compiled = compile_table(table, rules)
        self.overlap_resolver = OverlapResolver()

    def scan_unit(
        self,
        unit: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> List[RawMatch]:
        return scan_compiled(unit, self.compiled, progress_callback)

    def annotate(
        self,
        text: str,
        unit_mode: str = "document",
        resolve_overlaps: bool = True,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Annotation:
        """
        Annotate ``text``.

        Args:
            text: document text
            unit_mode: "document" scans the whole text at once, "line" scans
                each line separately so no match crosses a line break
            resolve_overlaps: when False, ``matches`` holds the raw matches
                and no segments are built
            progress_callback: called with (units done, total units)

        Returns:
            Annotation with document-level offsets
        """
        units = list(iter_text_units(text, unit_mode))
        raw: List[RawMatch] = []
        resolved: List[RawMatch] = []
        for idx, (offset, unit) in enumerate(units, start=1):
            unit_matches = [m.shifted(offset) for m in self.scan_unit(unit)]
            raw.extend(unit_matches)
            if resolve_overlaps:
                resolved.extend(self.overlap_resolver.resolve_overlaps(unit_matches))
            if progress_callback:
                progress_callback(idx, len(units))

        if not resolve_overlaps:
            logger.info("Found %s raw matches in %s text units", len(raw), len(units))
            return Annotation(text=text, raw_matches=tuple(raw), matches=tuple(raw), segments=())

        segments = build(text, resolved)
        logger.info(
            "Annotated %s text units: %s raw -> %s resolved matches",
            len(units),
            len(raw),
            len(resolved),
        )
        return Annotation(
            text=text,
            raw_matches=tuple(raw),
            matches=tuple(resolved),
            segments=tuple(segments),
        )


def annotate(
    text: str, table: MergedTable, rules: RuleSet = EMPTY_RULES
) -> List[AnnotationSegment]:
    """Scan, resolve and build ``text`` as a single unit."""
    return list(Annotator(table, rules).annotate(text).segments)

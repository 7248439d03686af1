"""
Scanning text for every candidate entity occurrence.

Matches of different names may overlap at this stage; the overlap resolver
removes them afterwards.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..catalog import MergedTable
from ..patterns import MatchPattern, compile_names
from ..rules_ast import EMPTY_RULES, RuleSet
from .core import RawMatch

logger = logging.getLogger(__name__)

CompiledTable = Sequence[Tuple[str, str, Sequence[MatchPattern]]]


def compile_table(table: MergedTable, rules: RuleSet = EMPTY_RULES) -> CompiledTable:
    """
    Compile patterns for every entity of ``table`` in table order.

    Returns:
        Tuples of (entity key, category, patterns)
    """
    compiled = []
    for key, record in table.entities.items():
        patterns = compile_names(record.names, record.category, rules)
        if patterns:
            compiled.append((key, record.category, tuple(patterns)))
    logger.debug(
        "Compiled %s patterns for %s entities",
        sum(len(p) for _, _, p in compiled),
        len(compiled),
    )
    return tuple(compiled)


def scan_compiled(
    text: str,
    compiled: CompiledTable,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> List[RawMatch]:
    """Apply pre-compiled patterns to ``text`` in discovery order."""
    matches: List[RawMatch] = []
    if not text:
        return matches

    total = len(compiled)
    for idx, (key, category, patterns) in enumerate(compiled, start=1):
        for pattern in patterns:
            for m in pattern.regex.finditer(text):
                if m.end() == m.start():
                    continue
                matches.append(
                    RawMatch(
                        start=m.start(),
                        end=m.end(),
                        text=m.group(0),
                        key=key,
                        category=category,
                    )
                )
        if progress_callback:
            progress_callback(idx, total)
    return matches


def scan(
    text: str,
    table: MergedTable,
    rules: RuleSet = EMPTY_RULES,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> List[RawMatch]:
    """
    Find all raw matches of all entity names in ``text``.

    Args:
        text: one text unit
        table: merged catalog snapshot
        rules: exclusion and case-sensitivity table
        progress_callback: called with (entities scanned, total entities)

    Returns:
        Raw matches in discovery order (entity, then name, then position)
    """
    matches = scan_compiled(text, compile_table(table, rules), progress_callback)
    logger.debug("Scan found %s raw matches", len(matches))
    return matches


def count_by_category(matches: Sequence[RawMatch]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for m in matches:
        counts[m.category] = counts.get(m.category, 0) + 1
    return counts

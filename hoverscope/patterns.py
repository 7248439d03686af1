"""
Pattern compilation for entity names.

Every entity name becomes one regular expression: the escaped name anchored
by word boundaries, wrapped in whatever exclusion lookarounds the rule table
registers for that exact name. Person names with two or more tokens also get
a reversed ``Last, First Middle`` form.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

from .rules_ast import EMPTY_RULES, RuleSet

logger = logging.getLogger(__name__)

PERSON_CATEGORY = "person"

RE_NAME_TOKEN = re.compile(r"[^\s,]+")


@dataclass(frozen=True)
class MatchPattern:
    """A compiled regex for one surface form of one entity name."""

    name: str
    category: str
    regex: Pattern
    case_sensitive: bool = False
    reversed_form: bool = False


def anchor(name: str) -> str:
    """Escape ``name`` and wrap it in word boundaries."""
    return rf"\b{re.escape(name)}\b"


@lru_cache(maxsize=4096)
def compile_pattern(
    name: str, category: str, rules: RuleSet = EMPTY_RULES
) -> Optional[MatchPattern]:
    """
    Compile the forward pattern for ``name``.

    Args:
        name: canonical name or alias as written in the catalog
        category: category of the owning entity
        rules: exclusion and case-sensitivity table to consult

    Returns:
        The compiled pattern, or None for an empty name
    """
    if not name:
        return None

    exclusions = rules.rules_for(name)
    prefix = "".join(rule.prefix() for rule in exclusions)
    suffix = "".join(rule.suffix() for rule in exclusions)
    case_sensitive = rules.is_case_sensitive(name)

    flags = 0 if case_sensitive else re.IGNORECASE
    regex = re.compile(prefix + anchor(name) + suffix, flags)
    if exclusions:
        logger.debug("Compiled '%s' with %s exclusion rule(s)", name, len(exclusions))
    return MatchPattern(
        name=name, category=category, regex=regex, case_sensitive=case_sensitive
    )


def _given_token(token: str) -> str:
    """
    Match a given-name token in full or as its initial, period optional.

    The full token is case-insensitive; the initial keeps its case so that
    lowercase letters after the comma are not read as initials.
    """
    core = token.rstrip(".")
    if not core:
        return re.escape(token)
    initial = rf"(?-i:{re.escape(core[0])})"
    if len(core) == 1:
        return rf"{initial}\.?"
    return rf"(?:{re.escape(core)}|{initial})\.?"


def split_name(name: str) -> List[str]:
    return RE_NAME_TOKEN.findall(name)


@lru_cache(maxsize=4096)
def compile_reversed_name(name: str) -> Optional[MatchPattern]:
    """
    Compile the ``Last, First Middle`` form of a person name.

    Given names may appear as initials, so "Jane A. Doe" also matches
    "Doe, J. A." and "Doe, Jane A.". Single-token names return None.
    """
    tokens = split_name(name)
    if len(tokens) < 2:
        return None
    *given, last = tokens
    given_part = r"\s*".join(_given_token(t) for t in given)
    # A trailing initial may end in ".", so use lookarounds instead of \b.
    source = rf"(?<!\w){re.escape(last)}\s*,\s*{given_part}(?!\w)"
    return MatchPattern(
        name=name,
        category=PERSON_CATEGORY,
        regex=re.compile(source, re.IGNORECASE),
        reversed_form=True,
    )


def compile_names(
    names: Tuple[str, ...], category: str, rules: RuleSet = EMPTY_RULES
) -> List[MatchPattern]:
    """
    Compile every surface form for one entity, in scan order.

    Each name contributes its forward pattern; person names with several
    tokens are followed by their reversed form.
    """
    patterns = []
    for name in names:
        pattern = compile_pattern(name, category, rules)
        if pattern is None:
            continue
        patterns.append(pattern)
        if category == PERSON_CATEGORY:
            reversed_pattern = compile_reversed_name(name)
            if reversed_pattern is not None:
                patterns.append(reversed_pattern)
    return patterns

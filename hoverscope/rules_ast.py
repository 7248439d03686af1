"""
Exclusion rule structures.

Each rule kind contributes a regex fragment placed either before the leading
word boundary (``prefix``) or after the trailing one (``suffix``) of an
anchored entity name.
"""

import re
from dataclasses import dataclass, field
from typing import Tuple, Union


def _phrase(words: str) -> str:
    """Escape a word or phrase, allowing any run of whitespace between words."""
    return r"\s+".join(re.escape(w) for w in words.split())


@dataclass(frozen=True)
class TrailingExclusion:
    """Suppress a name when it is followed by one of ``words``."""

    words: Tuple[str, ...]
    kind: str = field(default="trailing", init=False)

    def prefix(self) -> str:
        return ""

    def suffix(self) -> str:
        options = "|".join(_phrase(w) for w in self.words if w.strip())
        return rf"(?!\s+(?:{options}))" if options else ""


@dataclass(frozen=True)
class LeadingHyphenExclusion:
    """Suppress a name preceded by one or two hyphens (Fokker-Planck)."""

    kind: str = field(default="leading-hyphen", init=False)

    def prefix(self) -> str:
        # One hyphen of lookbehind also covers "--".
        return r"(?<!-)"

    def suffix(self) -> str:
        return ""


@dataclass(frozen=True)
class TrailingHyphenExclusion:
    """Suppress a name joined by a hyphen to one of ``tokens`` (COSMOS-Web)."""

    tokens: Tuple[str, ...]
    kind: str = field(default="trailing-hyphen", init=False)

    def prefix(self) -> str:
        return ""

    def suffix(self) -> str:
        options = "|".join(re.escape(t) for t in self.tokens if t)
        return rf"(?!-(?:{options}))" if options else ""


ExclusionRule = Union[TrailingExclusion, LeadingHyphenExclusion, TrailingHyphenExclusion]


@dataclass(frozen=True)
class Version:
    """The rules file format version."""

    value: str


@dataclass(frozen=True)
class CaseSensitive:
    """Names that must match with exact case."""

    names: Tuple[str, ...]


@dataclass(frozen=True)
class NameRule:
    """One exclusion rule attached to one entity name."""

    name: str
    rule: ExclusionRule


@dataclass(frozen=True)
class RuleSet:
    """
    Static table of per-name matching rules.

    Hashable so it can take part in compiled-pattern cache keys.
    """

    version: str = "1.0"
    case_sensitive: frozenset = frozenset()
    rules: Tuple[NameRule, ...] = ()

    def rules_for(self, name: str) -> Tuple[ExclusionRule, ...]:
        """Exclusion rules registered for exactly ``name``."""
        return tuple(r.rule for r in self.rules if r.name == name)

    def is_case_sensitive(self, name: str) -> bool:
        return name in self.case_sensitive


EMPTY_RULES = RuleSet()

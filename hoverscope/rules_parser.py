from functools import lru_cache
from pathlib import Path

from lark import Lark
from lark.exceptions import LarkError, VisitError

from hoverscope.errors import RuleSyntaxError
from hoverscope.rules_ast import RuleSet
from hoverscope.rules_transformer import RulesTransformer

# Version of the rules file format understood by this parser. Files must
# declare it in their "version" header.
RULES_VERSION = "1.0"

GRAMMAR_PATH = Path(__file__).parent / "rules_grammar.lark"
DEFAULT_RULES_PATH = Path(__file__).parent / "default.rules"

with open(GRAMMAR_PATH, "r", encoding="utf-8") as f:
    RULES_GRAMMAR = f.read()

rules_parser = Lark(RULES_GRAMMAR, start="root", parser="lalr", propagate_positions=True)


def parse_string(code: str, *, unwrap: bool = True) -> RuleSet:
    """
    Parse exclusion rules source into a RuleSet.

    Raises:
        RuleSyntaxError: the source does not follow the rules grammar or
            declares an unsupported version
    """
    try:
        tree = rules_parser.parse(code)
    except LarkError as e:
        raise RuleSyntaxError(f"Invalid rules source: {e}") from e
    try:
        rule_set = RulesTransformer().transform(tree)
    except VisitError as ve:
        if unwrap:
            raise RuleSyntaxError(str(ve.orig_exc)) from ve.orig_exc
        raise

    if rule_set.version != RULES_VERSION:
        raise RuleSyntaxError(
            f"Unsupported rules version: {rule_set.version}. Expected {RULES_VERSION}."
        )
    return rule_set


def parse_file(path, *, unwrap: bool = True) -> RuleSet:
    with open(path, "r", encoding="utf-8") as file:
        return parse_string(file.read(), unwrap=unwrap)


@lru_cache(maxsize=1)
def default_rules() -> RuleSet:
    """The bundled rule table."""
    return parse_file(DEFAULT_RULES_PATH)

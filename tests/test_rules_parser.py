import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from hoverscope import rules_parser
from hoverscope.errors import RuleSyntaxError
from hoverscope.rules_ast import (
    EMPTY_RULES,
    LeadingHyphenExclusion,
    NameRule,
    RuleSet,
    TrailingExclusion,
    TrailingHyphenExclusion,
)


def test_parse_version_only():
    rule_set = rules_parser.parse_string("version 1.0")
    assert isinstance(rule_set, RuleSet)
    assert rule_set.version == "1.0"
    assert rule_set.rules == ()
    assert rule_set.case_sensitive == frozenset()


def test_parse_requires_version():
    with pytest.raises(RuleSyntaxError):
        rules_parser.parse_string('case-sensitive ("ET")')


def test_parse_rejects_unknown_version():
    with pytest.raises(RuleSyntaxError, match="Unsupported rules version"):
        rules_parser.parse_string("version 2.0")


def test_parse_case_sensitive_statements_accumulate():
    code = """
    version 1.0
    case-sensitive ("ET", "FAST")
    case-sensitive ("FIRST")
    """
    rule_set = rules_parser.parse_string(code)
    assert rule_set.case_sensitive == frozenset({"ET", "FAST", "FIRST"})
    assert rule_set.is_case_sensitive("ET")
    assert not rule_set.is_case_sensitive("et")


def test_parse_trailing_rule_for_several_names():
    code = 'version 1.0\nexclude "Hubble", "HST" when followed-by ("parameter", "Frontier Fields")'
    rule_set = rules_parser.parse_string(code)
    expected = TrailingExclusion(words=("parameter", "Frontier Fields"))
    assert rule_set.rules == (
        NameRule(name="Hubble", rule=expected),
        NameRule(name="HST", rule=expected),
    )
    assert rule_set.rules_for("HST") == (expected,)
    assert rule_set.rules_for("Hubble Space Telescope") == ()


def test_parse_hyphen_rules():
    code = """
    version 1.0
    # comments are ignored
    exclude "Planck" when preceded-by-hyphen
    exclude "COSMOS" when hyphen-followed-by ("Web", "3D")
    """
    rule_set = rules_parser.parse_string(code)
    assert rule_set.rules_for("Planck") == (LeadingHyphenExclusion(),)
    assert rule_set.rules_for("COSMOS") == (TrailingHyphenExclusion(tokens=("Web", "3D")),)


def test_parse_several_rules_for_one_name():
    code = """
    version 1.0
    exclude "Planck" when preceded-by-hyphen
    exclude "Planck" when followed-by ("constant", "mass")
    """
    rules = rules_parser.parse_string(code).rules_for("Planck")
    assert [r.kind for r in rules] == ["leading-hyphen", "trailing"]


def test_parse_syntax_error():
    with pytest.raises(RuleSyntaxError):
        rules_parser.parse_string('version 1.0\nexclude "Hubble" when followed-by')


def test_parse_empty_name_rejected():
    with pytest.raises(RuleSyntaxError):
        rules_parser.parse_string('version 1.0\nexclude "" when preceded-by-hyphen')


def test_parse_file(tmp_path):
    path = tmp_path / "custom.rules"
    path.write_text('version 1.0\ncase-sensitive ("GAMA")\n', encoding="utf-8")
    assert rules_parser.parse_file(path).case_sensitive == frozenset({"GAMA"})


def test_default_rules_table():
    rule_set = rules_parser.default_rules()
    assert rule_set.case_sensitive == frozenset({"ET", "FIRST", "FAST", "INTEGRAL"})
    hubble = rule_set.rules_for("Hubble")
    assert len(hubble) == 1
    assert "Frontier Fields" in hubble[0].words
    assert rule_set.rules_for("HST") == hubble
    assert rule_set.rules_for("Hubble Space Telescope") == hubble
    assert rule_set.rules_for("Planck satellite") == (LeadingHyphenExclusion(),)
    assert rule_set.rules_for("COSMOS") == (TrailingHyphenExclusion(tokens=("Web",)),)


def test_rule_sets_are_hashable():
    extra = rules_parser.parse_string('version 1.0\ncase-sensitive ("GAMA")')
    assert hash(extra) == hash(rules_parser.parse_string('version 1.0\ncase-sensitive ("GAMA")'))
    assert extra.is_case_sensitive("GAMA")
    assert extra != EMPTY_RULES


def test_rule_fragments():
    assert LeadingHyphenExclusion().prefix() == r"(?<!-)"
    assert TrailingHyphenExclusion(tokens=("Web",)).suffix() == r"(?!-(?:Web))"
    assert TrailingExclusion(words=("Frontier Fields",)).suffix() == r"(?!\s+(?:Frontier\s+Fields))"
    assert TrailingExclusion(words=()).suffix() == ""

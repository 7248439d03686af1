"""
Lark transformer for hoverscope exclusion rules files.

Converts parse trees produced from ``rules_grammar.lark`` into a RuleSet.
"""

from lark import Transformer, v_args

from hoverscope import rules_ast as ast


@v_args(inline=True)
class RulesTransformer(Transformer):
    """Turns a rules parse tree into frozen rule structures."""

    def root(self, version, *statements):
        case_sensitive = set()
        rules = []
        for stmt in statements:
            if isinstance(stmt, ast.CaseSensitive):
                case_sensitive.update(stmt.names)
            else:
                rules.extend(stmt)
        return ast.RuleSet(
            version=version.value,
            case_sensitive=frozenset(case_sensitive),
            rules=tuple(rules),
        )

    def version_stmt(self, token):
        return ast.Version(value=str(token))

    def case_stmt(self, names):
        return ast.CaseSensitive(names=names)

    def exclude_stmt(self, names, condition):
        if not all(names):
            raise ValueError("Exclusion rules need non-empty names")
        return [ast.NameRule(name=name, rule=condition) for name in names]

    def trailing(self, words):
        return ast.TrailingExclusion(words=words)

    def leading_hyphen(self):
        return ast.LeadingHyphenExclusion()

    def trailing_hyphen(self, tokens):
        return ast.TrailingHyphenExclusion(tokens=tokens)

    def string_list(self, *items):
        return tuple(str(item)[1:-1] for item in items)

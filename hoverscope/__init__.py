"""
hoverscope - annotate text with catalog entities.

Typical use::

    table = load_table(load_bundled_catalogs())
    annotation = Annotator(table, default_rules()).annotate(text)
"""

from .annotator import Annotation, Annotator, annotate, build, resolve, scan
from .catalog import (
    Catalog,
    CatalogMerger,
    EntityRecord,
    MergedTable,
    TableStore,
    load_table,
    merge,
)
from .errors import (
    CatalogFetchError,
    HoverscopeError,
    MalformedCatalogError,
    MissingCatalogError,
    RuleSyntaxError,
)
from .fields import RenderedEntity, format_tooltip, render_entity, render_fields
from .patterns import MatchPattern, compile_pattern
from .rules_parser import default_rules
from .sources import fetch_remote_catalogs, load_bundled_catalogs, refresh

__version__ = "0.1.0"

__all__ = [
    "Annotation",
    "Annotator",
    "annotate",
    "build",
    "resolve",
    "scan",
    "Catalog",
    "CatalogMerger",
    "EntityRecord",
    "MergedTable",
    "TableStore",
    "load_table",
    "merge",
    "CatalogFetchError",
    "HoverscopeError",
    "MalformedCatalogError",
    "MissingCatalogError",
    "RuleSyntaxError",
    "RenderedEntity",
    "format_tooltip",
    "render_entity",
    "render_fields",
    "MatchPattern",
    "compile_pattern",
    "default_rules",
    "fetch_remote_catalogs",
    "load_bundled_catalogs",
    "refresh",
]

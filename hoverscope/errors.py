"""
Exception types raised by the hoverscope engine.
"""


class HoverscopeError(Exception):
    """Base class for all hoverscope errors."""


class MissingCatalogError(HoverscopeError):
    """A required catalog was absent when building the merged table."""


class MalformedCatalogError(HoverscopeError):
    """A catalog or catalog entry has the wrong shape and cannot be merged."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"Malformed catalog entry '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


class CatalogFetchError(HoverscopeError):
    """Catalog files could not be read or downloaded."""


class RuleSyntaxError(HoverscopeError):
    """An exclusion rules file could not be parsed."""

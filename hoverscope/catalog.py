"""
Catalog merging for hoverscope.

Combines independently authored entity catalogs (one per category) into a
single immutable lookup table and assigns every entity the display-order
profile of its category.

The merge runs in two passes over the caller-supplied catalog order:

1. Resolve one display-order profile per profile key. The first catalog that
   supplies a non-empty ``display_order`` wins; otherwise a built-in default
   is used.
2. Fold entity records into the table. Later catalogs overwrite earlier ones
   that share an identifier (last write wins).
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .errors import MalformedCatalogError, MissingCatalogError

logger = logging.getLogger(__name__)

DISPLAY_ORDER_KEY = "display_order"

# Fields with a dedicated meaning; never copied into EntityRecord.fields.
RESERVED_FIELDS = frozenset(
    {"id", "identifier", "name", "aliases", "description", "order_key", "profile_key"}
)

CATEGORY_PROFILES = {
    "instrument": "telescope",
    "survey": "telescope",
    "simulation": "simulation",
    "model": "SAM",
    "person": "person",
}

DEFAULT_DISPLAY_ORDERS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "telescope": (
            "type",
            "launch_date",
            "wavelengths",
            "survey_area",
            "location",
            "status",
        ),
        "simulation": (
            "type",
            "volume",
            "mass_resolution",
            "code",
            "included_physics",
            "hydrodynamics",
            "subgrid_model",
        ),
        "SAM": (
            "type",
            "included_physics",
            "volume",
            "mass_resolution",
            "end_redshift",
            "merger_tree_code",
            "parent_simulation",
        ),
    }
)


@dataclass(frozen=True)
class EntityRecord:
    """A single named entity eligible for text matching."""

    identifier: str
    name: str
    category: str
    profile_key: str
    aliases: Tuple[str, ...] = ()
    fields: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)
    description: Optional[str] = None

    @property
    def names(self) -> Tuple[str, ...]:
        """Canonical name followed by aliases, empty strings dropped."""
        return tuple(n for n in (self.name,) + self.aliases if n)


@dataclass(frozen=True)
class Catalog:
    """Entities of one category plus an optional display-order override."""

    category: str
    entries: Mapping[str, Mapping[str, Any]]
    display_order: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, category: str, data: Mapping[str, Any]) -> "Catalog":
        """
        Build a catalog from parsed JSON-shaped data.

        The ``display_order`` pseudo-entry is split off; every other key is an
        entity identifier.
        """
        if data is None:
            raise MissingCatalogError(f"No data supplied for '{category}' catalog")
        if category not in CATEGORY_PROFILES:
            raise ValueError(f"Unknown catalog category: {category}")
        if not isinstance(data, Mapping):
            raise MalformedCatalogError(category, "catalog is not a mapping")
        order = data.get(DISPLAY_ORDER_KEY) or ()
        if isinstance(order, str):
            order = (order,)
        if not isinstance(order, (list, tuple)) or not all(
            isinstance(f, str) for f in order
        ):
            logger.warning(
                "Ignoring malformed display_order in %s catalog: %r", category, order
            )
            order = ()
        entries = {k: v for k, v in data.items() if k != DISPLAY_ORDER_KEY}
        return cls(
            category=category,
            entries=MappingProxyType(entries),
            display_order=tuple(str(f) for f in order),
        )

    @property
    def profile_key(self) -> str:
        return CATEGORY_PROFILES[self.category]


@dataclass(frozen=True)
class MergedTable:
    """
    Immutable union of all catalogs.

    ``entities`` preserves merge order, which is also the scan order.
    """

    entities: Mapping[str, EntityRecord]
    display_orders: Mapping[str, Tuple[str, ...]]
    version: int = 0

    def __len__(self) -> int:
        return len(self.entities)

    def get(self, identifier: str) -> Optional[EntityRecord]:
        return self.entities.get(identifier)

    def profile_for(self, record: EntityRecord) -> Tuple[str, ...]:
        """Display-order profile assigned to ``record``."""
        return self.display_orders.get(record.profile_key, ())


EMPTY_TABLE = MergedTable(
    entities=MappingProxyType({}), display_orders=DEFAULT_DISPLAY_ORDERS
)

_versions = itertools.count(1)


def _coerce_aliases(identifier: str, raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        logger.warning("Ignoring non-list aliases for '%s': %r", identifier, raw)
        return ()
    return tuple(a.strip() for a in raw if isinstance(a, str) and a.strip())


def build_record(
    identifier: str, entry: Mapping[str, Any], category: str, profile_key: str
) -> EntityRecord:
    """
    Convert one raw catalog entry into an EntityRecord.

    Raises:
        MalformedCatalogError: entry is not a mapping or has no usable name
    """
    if not isinstance(entry, Mapping):
        raise MalformedCatalogError(identifier, "entry is not a mapping")
    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MalformedCatalogError(identifier, "missing canonical name")

    description = entry.get("description")
    if description is not None:
        description = str(description).strip() or None

    extra = {k: v for k, v in entry.items() if k not in RESERVED_FIELDS}
    return EntityRecord(
        identifier=identifier,
        name=name.strip(),
        category=category,
        profile_key=profile_key,
        aliases=_coerce_aliases(identifier, entry.get("aliases")),
        fields=MappingProxyType(extra),
        description=description,
    )


class CatalogMerger:
    """Two-pass builder turning an ordered catalog list into a MergedTable."""

    def __init__(self, defaults: Mapping[str, Tuple[str, ...]] = DEFAULT_DISPLAY_ORDERS):
        self.defaults = defaults

    @staticmethod
    def _check(catalogs: Optional[Sequence[Catalog]]) -> Tuple[Catalog, ...]:
        if catalogs is None:
            raise MissingCatalogError("No catalogs supplied")
        snapshot = tuple(catalogs)
        for index, catalog in enumerate(snapshot):
            if catalog is None:
                raise MissingCatalogError(f"Catalog at position {index} is missing")
        return snapshot

    def resolve_profiles(
        self, catalogs: Sequence[Catalog]
    ) -> Dict[str, Tuple[str, ...]]:
        """Pass 1: pick one display order per profile key."""
        profiles: Dict[str, Tuple[str, ...]] = {}
        for catalog in catalogs:
            key = catalog.profile_key
            if key not in profiles and catalog.display_order:
                profiles[key] = catalog.display_order
        for key, order in self.defaults.items():
            profiles.setdefault(key, tuple(order))
        for catalog in catalogs:
            profiles.setdefault(catalog.profile_key, ())
        return profiles

    @staticmethod
    def fold_records(catalogs: Sequence[Catalog]) -> Dict[str, EntityRecord]:
        """Pass 2: fold entries into one identifier-keyed mapping."""
        records: Dict[str, EntityRecord] = {}
        for catalog in catalogs:
            merged = 0
            for identifier, entry in catalog.entries.items():
                try:
                    record = build_record(
                        identifier, entry, catalog.category, catalog.profile_key
                    )
                except MalformedCatalogError as e:
                    logger.warning("Skipping entry in %s catalog: %s", catalog.category, e)
                    continue
                if identifier in records:
                    logger.debug(
                        "Entry '%s' from %s catalog overrides earlier %s entry",
                        identifier,
                        catalog.category,
                        records[identifier].category,
                    )
                records[identifier] = record
                merged += 1
            logger.debug("Merged %s entries from %s catalog", merged, catalog.category)
        return records

    def merge(self, catalogs: Optional[Sequence[Catalog]]) -> MergedTable:
        snapshot = self._check(catalogs)
        profiles = self.resolve_profiles(snapshot)
        records = self.fold_records(snapshot)
        table = MergedTable(
            entities=MappingProxyType(records),
            display_orders=MappingProxyType(profiles),
            version=next(_versions),
        )
        logger.info(
            "Merged %s entries from %s catalogs (table version %s)",
            len(records),
            len(snapshot),
            table.version,
        )
        return table


def merge(catalogs: Optional[Sequence[Catalog]]) -> MergedTable:
    """Merge ``catalogs`` in the given order; later catalogs win on collision."""
    return CatalogMerger().merge(catalogs)


def load_table(catalogs: Optional[Sequence[Catalog]]) -> MergedTable:
    """Build a fresh MergedTable. Callers pass primary catalogs before overrides."""
    return merge(catalogs)


class TableStore:
    """
    Owns the current MergedTable.

    Readers take ``store.current`` once and use that snapshot for the whole
    scan. ``load`` replaces the reference in one step; a failed load leaves
    the previous table in place.
    """

    def __init__(self, table: MergedTable = EMPTY_TABLE):
        self._table = table
        self._lock = threading.Lock()

    @property
    def current(self) -> MergedTable:
        return self._table

    def swap(self, table: MergedTable) -> MergedTable:
        """Install ``table`` and return the one it replaced."""
        with self._lock:
            previous, self._table = self._table, table
        logger.debug("Swapped table version %s -> %s", previous.version, table.version)
        return previous

    def load(self, catalogs: Iterable[Catalog]) -> MergedTable:
        table = load_table(None if catalogs is None else list(catalogs))
        self.swap(table)
        return table

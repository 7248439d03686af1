"""
Tests for catalog merging and the table store.
"""

import os
import sys
import threading

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from hoverscope.catalog import (
    DEFAULT_DISPLAY_ORDERS,
    EMPTY_TABLE,
    Catalog,
    CatalogMerger,
    TableStore,
    load_table,
    merge,
)
from hoverscope.errors import MalformedCatalogError, MissingCatalogError


def make_catalog(category, data):
    return Catalog.from_mapping(category, data)


class TestCatalog:
    """Building catalogs from parsed JSON data."""

    def test_display_order_is_split_off(self):
        catalog = make_catalog(
            "instrument",
            {"display_order": ["status", "type"], "JWST": {"name": "JWST"}},
        )
        assert catalog.display_order == ("status", "type")
        assert list(catalog.entries) == ["JWST"]
        assert catalog.profile_key == "telescope"

    def test_none_data_is_missing(self):
        with pytest.raises(MissingCatalogError):
            Catalog.from_mapping("survey", None)

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            Catalog.from_mapping("planet", {})

    def test_non_mapping_data_is_malformed(self):
        with pytest.raises(MalformedCatalogError, match="not a mapping"):
            Catalog.from_mapping("survey", ["SDSS"])

    @pytest.mark.parametrize("order", [3, {"status": 1}, ["status", 5]])
    def test_malformed_display_order_is_ignored(self, order, caplog):
        catalog = make_catalog(
            "instrument", {"display_order": order, "JWST": {"name": "JWST"}}
        )
        assert catalog.display_order == ()
        assert list(catalog.entries) == ["JWST"]
        assert "malformed display_order" in caplog.text


class TestMerge:
    """Catalog merge semantics."""

    def test_last_catalog_wins_on_collision(self):
        a = make_catalog("instrument", {"x": {"name": "Foo"}})
        b = make_catalog("survey", {"x": {"name": "Bar"}})
        table = merge([a, b])
        assert table.get("x").name == "Bar"
        assert table.get("x").category == "survey"
        assert len(table) == 1

    def test_merge_order_is_a_parameter(self):
        a = make_catalog("instrument", {"x": {"name": "Foo"}})
        b = make_catalog("survey", {"x": {"name": "Bar"}})
        assert merge([b, a]).get("x").name == "Foo"

    def test_fields_and_profile_key_are_stamped(self):
        sims = make_catalog(
            "simulation",
            {
                "EAGLE": {
                    "name": "EAGLE",
                    "aliases": ["Eagle sim"],
                    "code": "GADGET-3",
                    "description": "  Hydro run. ",
                    "order_key": "ignored",
                }
            },
        )
        record = merge([sims]).get("EAGLE")
        assert record.profile_key == "simulation"
        assert record.aliases == ("Eagle sim",)
        assert dict(record.fields) == {"code": "GADGET-3"}
        assert record.description == "Hydro run."
        assert record.names == ("EAGLE", "Eagle sim")

    def test_string_alias_becomes_single_alias(self):
        table = merge([make_catalog("model", {"s": {"name": "SAGE", "aliases": "Sage"}})])
        assert table.get("s").aliases == ("Sage",)

    def test_malformed_entry_is_skipped(self):
        catalog = make_catalog(
            "instrument",
            {
                "good": {"name": "Euclid"},
                "blank": {"name": "   "},
                "nameless": {"type": "Radio telescope"},
                "scalar": "not a mapping",
            },
        )
        table = merge([catalog])
        assert list(table.entities) == ["good"]

    def test_build_record_raises_for_missing_name(self):
        from hoverscope.catalog import build_record

        with pytest.raises(MalformedCatalogError) as exc:
            build_record("x", {"type": "t"}, "instrument", "telescope")
        assert exc.value.identifier == "x"

    def test_missing_catalog_argument(self):
        with pytest.raises(MissingCatalogError):
            merge(None)
        with pytest.raises(MissingCatalogError):
            merge([make_catalog("instrument", {}), None])

    def test_empty_catalog_list(self):
        table = merge([])
        assert len(table) == 0
        assert table.display_orders["telescope"] == DEFAULT_DISPLAY_ORDERS["telescope"]

    def test_load_table_matches_merge(self):
        a = make_catalog("instrument", {"x": {"name": "Foo"}})
        assert load_table([a]).get("x").name == merge([a]).get("x").name

    def test_versions_increase(self):
        first = merge([])
        second = merge([])
        assert second.version > first.version > EMPTY_TABLE.version


class TestProfiles:
    """Display-order profile resolution."""

    def test_first_override_wins(self):
        telescopes = make_catalog("instrument", {"display_order": ["status"]})
        surveys = make_catalog("survey", {"display_order": ["survey_area"]})
        table = merge([telescopes, surveys])
        assert table.display_orders["telescope"] == ("status",)

    def test_empty_override_falls_through(self):
        telescopes = make_catalog("instrument", {"display_order": []})
        surveys = make_catalog("survey", {"display_order": ["survey_area"]})
        table = merge([telescopes, surveys])
        assert table.display_orders["telescope"] == ("survey_area",)

    def test_defaults_used_without_override(self):
        table = merge([make_catalog("simulation", {}), make_catalog("model", {})])
        assert table.display_orders["simulation"] == DEFAULT_DISPLAY_ORDERS["simulation"]
        assert table.display_orders["SAM"] == DEFAULT_DISPLAY_ORDERS["SAM"]

    def test_person_profile_defaults_to_empty(self):
        people = make_catalog("person", {"p": {"name": "Jane Doe", "field": "Cosmology"}})
        table = merge([people])
        record = table.get("p")
        assert record.profile_key == "person"
        assert table.profile_for(record) == ()

    def test_resolve_profiles_custom_defaults(self):
        merger = CatalogMerger(defaults={"telescope": ("type",)})
        profiles = merger.resolve_profiles([make_catalog("instrument", {})])
        assert profiles == {"telescope": ("type",)}


class TestTableStore:
    """Atomic swap of the current table."""

    def test_starts_empty(self):
        store = TableStore()
        assert store.current is EMPTY_TABLE
        assert len(store.current) == 0

    def test_load_swaps_table(self):
        store = TableStore()
        snapshot = store.current
        table = store.load([make_catalog("instrument", {"x": {"name": "Foo"}})])
        assert store.current is table
        # Earlier snapshot is untouched.
        assert len(snapshot) == 0

    def test_failed_load_keeps_previous(self):
        store = TableStore()
        table = store.load([make_catalog("instrument", {"x": {"name": "Foo"}})])
        with pytest.raises(MissingCatalogError):
            store.load(None)
        assert store.current is table

    def test_concurrent_readers_see_whole_tables(self):
        store = TableStore()
        tables = [merge([make_catalog("instrument", {str(i): {"name": f"T{i}"}})]) for i in range(20)]
        seen = []

        def reader():
            for _ in range(200):
                current = store.current
                seen.append((current.version, len(current)))

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for table in tables:
            store.swap(table)
        for t in threads:
            t.join()

        assert store.current is tables[-1]
        assert all(size in (0, 1) for _, size in seen)

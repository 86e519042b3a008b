"""
Unit tests for the component-graph allergen resolver (Layer 1).
"""

import threading

import pytest

from recipekit.diff.allergen_resolver import (
    CatalogAttributes,
    CustomAllergen,
    ResolvedAttributeSet,
    catalog_attributes_from_record,
    prefetch_lookups,
    resolve_component,
    resolve_effective,
    resolve_effective_present,
)
from recipekit.diff.snapshot import Component, ComponentKind
from recipekit.schema import Allergen


def make_component(component_id, reference_id, kind=ComponentKind.DIRECT_REFERENCE):
    return Component(id=component_id, kind=kind, name=component_id, reference_id=reference_id)


@pytest.fixture
def catalog():
    return {
        "mi-butter": CatalogAttributes(contains=frozenset({Allergen.MILK})),
        "mi-granola": CatalogAttributes(
            contains=frozenset({Allergen.TREENUT}),
            may_contain=frozenset({Allergen.PEANUT, Allergen.TREENUT}),
        ),
    }


@pytest.fixture
def nested():
    return {
        "r-pesto": ResolvedAttributeSet(present=frozenset({"TreeNut", "milk"}), possible=frozenset({"peanut"})),
    }


class TestCatalogRecords:
    """Boolean-coded catalog rows decode into CatalogAttributes."""

    def test_flag_encodings(self):
        attributes = catalog_attributes_from_record({
            "allergen_milk": True,
            "allergen_egg": "true",
            "allergen_fish": 1,
            "allergen_soy": False,
            "allergen_wheat": "false",
            "allergen_sesame": 0,
        })

        assert attributes.contains == frozenset({Allergen.MILK, Allergen.EGG, Allergen.FISH})

    def test_contains_wins_over_may_contain(self):
        attributes = catalog_attributes_from_record({
            "allergen_peanut": True,
            "allergen_peanut_may_contain": True,
            "allergen_sesame_may_contain": True,
        })

        assert attributes.contains == frozenset({Allergen.PEANUT})
        assert attributes.may_contain == frozenset({Allergen.SESAME})

    def test_custom_slots(self):
        attributes = catalog_attributes_from_record({
            "allergen_custom1_active": True,
            "allergen_custom1_name": "Lupin",
            "allergen_custom2_active": True,
            "allergen_custom2_name": "Cinnamon",
            "allergen_custom2_may_contain": True,
            "allergen_custom3_active": False,
            "allergen_custom3_name": "Corn",
        })

        assert attributes.custom == (
            CustomAllergen(slot=1, name="Lupin"),
            CustomAllergen(slot=2, name="Cinnamon", may_contain=True),
        )
        assert attributes.present_keys() == frozenset({"lupin"})
        assert attributes.possible_keys() == frozenset({"cinnamon"})

    def test_active_custom_without_name_ignored(self):
        attributes = catalog_attributes_from_record({
            "allergen_custom1_active": True,
            "allergen_custom1_name": "  ",
        })

        assert attributes.custom == ()

    def test_missing_record(self):
        assert catalog_attributes_from_record(None) is None

    def test_at_most_three_custom_slots(self):
        with pytest.raises(ValueError):
            CatalogAttributes(custom=tuple(CustomAllergen(slot=i, name=f"c{i}") for i in range(1, 5)))


class TestResolveComponent:

    def test_direct_reference(self, catalog, nested):
        resolved = resolve_component(make_component("c1", "mi-granola"), catalog.get, nested.get)

        assert resolved.present == frozenset({"treenut"})
        assert resolved.possible == frozenset({"peanut"})
        assert resolved.dangling is False

    def test_nested_reference(self, catalog, nested):
        component = make_component("c2", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE)
        resolved = resolve_component(component, catalog.get, nested.get)

        assert resolved.present == frozenset({"treenut", "milk"})
        assert resolved.possible == frozenset({"peanut"})

    def test_nested_reference_does_not_use_catalog(self, nested):
        def catalog_lookup(reference_id):
            raise AssertionError("catalog must not be consulted for a nested reference")

        component = make_component("c2", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE)
        assert resolve_component(component, catalog_lookup, nested.get).dangling is False

    def test_dangling(self, catalog, nested):
        resolved = resolve_component(make_component("c3", "mi-gone"), catalog.get, nested.get)

        assert resolved.dangling is True
        assert resolved.present == frozenset()


class TestResolveEffective:

    def test_union_of_components(self, catalog, nested):
        components = [
            make_component("c1", "mi-butter"),
            make_component("c2", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE),
            make_component("c0", "mi-gone"),
            make_component("c9", None),
        ]
        effective = resolve_effective(components, catalog.get, nested.get)

        assert effective.present == frozenset({"milk", "treenut"})
        assert effective.possible == frozenset({"peanut"})
        assert [c.id for c in effective.dangling] == ["c0", "c9"]

    def test_possible_excludes_present(self, catalog, nested):
        components = [
            make_component("c1", "mi-granola"),
            make_component("c2", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE),
        ]
        effective = resolve_effective(components, catalog.get, nested.get)

        assert "treenut" not in effective.possible

    def test_order_independent(self, catalog, nested):
        components = [make_component("c1", "mi-butter"), make_component("c2", "mi-granola")]

        forward = resolve_effective(components, catalog.get, nested.get)
        backward = resolve_effective(list(reversed(components)), catalog.get, nested.get)
        assert forward == backward

    def test_present_only(self, catalog, nested):
        present = resolve_effective_present([make_component("c1", "mi-butter")], catalog.get, nested.get)

        assert present == frozenset({"milk"})

    def test_empty(self, catalog, nested):
        assert resolve_effective([], catalog.get, nested.get).present == frozenset()


class TestPrefetchLookups:
    """Concurrent prefetch collects every result before returning."""

    def test_each_reference_fetched_once(self, catalog, nested):
        calls = []
        lock = threading.Lock()

        def catalog_lookup(reference_id):
            with lock:
                calls.append(reference_id)
            return catalog.get(reference_id)

        components = [
            make_component("c1", "mi-butter"),
            make_component("c2", "mi-butter"),
            make_component("c3", "mi-gone"),
            make_component("c4", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE),
            make_component("c5", None),
        ]
        cached_catalog, cached_nested = prefetch_lookups(components, catalog_lookup, nested.get)

        assert sorted(calls) == ["mi-butter", "mi-gone"]
        assert cached_catalog("mi-butter") == catalog["mi-butter"]
        assert cached_catalog("mi-gone") is None
        assert cached_nested("r-pesto") == nested["r-pesto"]

    def test_lookup_failure_propagates(self, nested):
        def catalog_lookup(reference_id):
            raise TimeoutError("catalog timed out")

        with pytest.raises(TimeoutError):
            prefetch_lookups([make_component("c1", "mi-butter")], catalog_lookup, nested.get)

    def test_prefetched_results_match_direct(self, catalog, nested):
        components = [
            make_component("c1", "mi-butter"),
            make_component("c2", "r-pesto", ComponentKind.NESTED_DOCUMENT_REFERENCE),
        ]
        cached_catalog, cached_nested = prefetch_lookups(components, catalog.get, nested.get, max_workers=2)

        assert resolve_effective(components, cached_catalog, cached_nested) == \
            resolve_effective(components, catalog.get, nested.get)

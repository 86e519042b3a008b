"""
Component-graph allergen resolver.

Computes the allergens a recipe actually carries from its component list,
independently of the declaration cached on the snapshot:

- A direct reference resolves through the catalog: each catalog item carries
  boolean-coded flags for the standard allergens plus up to three
  operator-defined custom allergens.
- A nested document reference resolves to that recipe's own, already
  resolved allergen set. Resolution is one level deep; the nested recipe's
  set is treated as authoritative, so reference cycles cannot recurse.

A lookup that returns None is a dangling reference. It contributes no
allergens and is reported back to the caller, never raised.

Lookups are injected capabilities. They may hit a cache, a database or an
in-memory table; the resolver does not care.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from ..schema import Allergen, CUSTOM_ALLERGEN_SLOTS
from .set_diff import normalize_identifier
from .snapshot import Component, ComponentKind

logger = logging.getLogger(__name__)


# =============================================================================
# CATALOG ATTRIBUTES
# =============================================================================

@dataclass(frozen=True)
class CustomAllergen:
    """
    An operator-defined allergen slot on a catalog item.

    Only active slots with a name contribute. A slot is either CONTAINS or,
    when may_contain is set, MAY CONTAIN.
    """
    slot: int
    name: str
    active: bool = True
    may_contain: bool = False

    @property
    def key(self) -> str:
        return normalize_identifier(self.name)


@dataclass(frozen=True)
class CatalogAttributes:
    """
    Allergen flags of one catalog item.

    Standard allergens are a closed enumeration; custom allergens are a
    bounded list of tagged slots.
    """
    contains: FrozenSet[Allergen] = frozenset()
    may_contain: FrozenSet[Allergen] = frozenset()
    custom: Tuple[CustomAllergen, ...] = ()

    def __post_init__(self):
        if len(self.custom) > CUSTOM_ALLERGEN_SLOTS:
            raise ValueError(
                f"A catalog item has at most {CUSTOM_ALLERGEN_SLOTS} custom allergens, "
                f"got {len(self.custom)}"
            )
        object.__setattr__(self, "contains", frozenset(self.contains))
        object.__setattr__(self, "may_contain", frozenset(self.may_contain))
        object.__setattr__(self, "custom", tuple(self.custom))

    def present_keys(self) -> FrozenSet[str]:
        """Attribute keys this item definitely contains."""
        keys = {a.value for a in self.contains}
        keys.update(
            c.key for c in self.custom
            if c.active and c.key and not c.may_contain
        )
        return frozenset(keys)

    def possible_keys(self) -> FrozenSet[str]:
        """Attribute keys this item may contain, excluding definite ones."""
        keys = {a.value for a in self.may_contain}
        keys.update(
            c.key for c in self.custom
            if c.active and c.key and c.may_contain
        )
        return frozenset(keys - self.present_keys())


@dataclass(frozen=True)
class ResolvedAttributeSet:
    """The allergen set a nested recipe resolved for itself."""
    present: FrozenSet[str] = frozenset()
    possible: FrozenSet[str] = frozenset()

    def __post_init__(self):
        present = frozenset(normalize_identifier(p) for p in self.present if p.strip())
        possible = frozenset(normalize_identifier(p) for p in self.possible if p.strip())
        object.__setattr__(self, "present", present)
        object.__setattr__(self, "possible", possible - present)


CatalogLookup = Callable[[str], Optional[CatalogAttributes]]
NestedLookup = Callable[[str], Optional[ResolvedAttributeSet]]


# =============================================================================
# BOOLEAN-CODED CATALOG RECORDS
# =============================================================================
# Catalog records store one boolean column per allergen and flag:
#   allergen_<key>, allergen_<key>_may_contain
#   allergen_custom<n>_active, allergen_custom<n>_name, allergen_custom<n>_may_contain
# The column names are fixed by the catalog schema; they are mapped once
# here so nothing downstream handles column names.

ALLERGEN_COLUMNS: Dict[Allergen, Tuple[str, str]] = {
    allergen: (f"allergen_{allergen.value}", f"allergen_{allergen.value}_may_contain")
    for allergen in Allergen
}

CUSTOM_ALLERGEN_COLUMNS: List[Tuple[int, str, str, str]] = [
    (
        slot,
        f"allergen_custom{slot}_active",
        f"allergen_custom{slot}_name",
        f"allergen_custom{slot}_may_contain",
    )
    for slot in range(1, CUSTOM_ALLERGEN_SLOTS + 1)
]


def _is_flag_set(value: Any) -> bool:
    """Catalog flags arrive as True, "true" or 1 depending on the source."""
    return value is True or value == "true" or (value == 1 and not isinstance(value, bool))


def catalog_attributes_from_record(record: Optional[Mapping[str, Any]]) -> Optional[CatalogAttributes]:
    """
    Decode a boolean-coded catalog record into CatalogAttributes.

    A standard allergen flagged both CONTAINS and MAY CONTAIN is kept only
    as CONTAINS.

    Args:
        record: Catalog row (None when the item does not exist)

    Returns:
        CatalogAttributes, or None if record is None
    """
    if record is None:
        return None

    contains: Set[Allergen] = set()
    may_contain: Set[Allergen] = set()

    for allergen, (contains_column, may_contain_column) in ALLERGEN_COLUMNS.items():
        if _is_flag_set(record.get(contains_column)):
            contains.add(allergen)
        elif _is_flag_set(record.get(may_contain_column)):
            may_contain.add(allergen)

    custom: List[CustomAllergen] = []
    for slot, active_column, name_column, may_contain_column in CUSTOM_ALLERGEN_COLUMNS:
        name = record.get(name_column)
        if _is_flag_set(record.get(active_column)) and name and str(name).strip():
            custom.append(CustomAllergen(
                slot=slot,
                name=str(name),
                active=True,
                may_contain=_is_flag_set(record.get(may_contain_column)),
            ))

    return CatalogAttributes(
        contains=frozenset(contains),
        may_contain=frozenset(may_contain),
        custom=tuple(custom),
    )


# =============================================================================
# RESOLUTION
# =============================================================================

@dataclass(frozen=True)
class ComponentAttributes:
    """What a single component contributes, and whether its reference resolved."""
    component: Component
    present: FrozenSet[str] = frozenset()
    possible: FrozenSet[str] = frozenset()
    dangling: bool = False


@dataclass(frozen=True)
class EffectiveAttributes:
    """Allergens resolved from a whole component list."""
    present: FrozenSet[str] = frozenset()
    possible: FrozenSet[str] = frozenset()
    dangling: Tuple[Component, ...] = ()


def resolve_component(
    component: Component,
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup
) -> ComponentAttributes:
    """
    Resolve the allergens contributed by one component.

    Exceptions raised by a lookup propagate; only a None result counts as
    "not found".

    Args:
        component: Component to resolve
        catalog_lookup: reference_id -> CatalogAttributes or None
        nested_lookup: document_id -> ResolvedAttributeSet or None

    Returns:
        ComponentAttributes (dangling=True when the reference did not resolve)
    """
    if not component.reference_id:
        return ComponentAttributes(component=component, dangling=True)

    if component.kind == ComponentKind.DIRECT_REFERENCE:
        attributes = catalog_lookup(component.reference_id)
        if attributes is None:
            return ComponentAttributes(component=component, dangling=True)
        return ComponentAttributes(
            component=component,
            present=attributes.present_keys(),
            possible=attributes.possible_keys(),
        )

    resolved = nested_lookup(component.reference_id)
    if resolved is None:
        return ComponentAttributes(component=component, dangling=True)
    return ComponentAttributes(
        component=component,
        present=resolved.present,
        possible=resolved.possible,
    )


def resolve_effective(
    components: Iterable[Component],
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup,
    debug: bool = False
) -> EffectiveAttributes:
    """
    Resolve the effective allergen sets of a component list.

    The result does not depend on component order: present and possible are
    sets, and dangling components are reported sorted by id.

    Args:
        components: Component list of a snapshot
        catalog_lookup: reference_id -> CatalogAttributes or None
        nested_lookup: document_id -> ResolvedAttributeSet or None
        debug: Log each component's contribution

    Returns:
        EffectiveAttributes
    """
    present: Set[str] = set()
    possible: Set[str] = set()
    dangling: List[Component] = []

    for component in components:
        resolved = resolve_component(component, catalog_lookup, nested_lookup)
        if resolved.dangling:
            dangling.append(component)
            if debug:
                logger.info(
                    f"Component '{component.display_name}' did not resolve "
                    f"({component.kind.value} -> {component.reference_id or 'no reference'})"
                )
            continue
        present.update(resolved.present)
        possible.update(resolved.possible)
        if debug:
            logger.info(
                f"Component '{component.display_name}' contributes "
                f"present={sorted(resolved.present)} possible={sorted(resolved.possible)}"
            )

    return EffectiveAttributes(
        present=frozenset(present),
        possible=frozenset(possible - present),
        dangling=tuple(sorted(dangling, key=lambda c: c.id)),
    )


def resolve_effective_present(
    components: Iterable[Component],
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup
) -> FrozenSet[str]:
    """
    Resolve the set of allergens a component list definitely contains.

    Args:
        components: Component list of a snapshot
        catalog_lookup: reference_id -> CatalogAttributes or None
        nested_lookup: document_id -> ResolvedAttributeSet or None

    Returns:
        Frozen set of attribute keys
    """
    return resolve_effective(components, catalog_lookup, nested_lookup).present


# =============================================================================
# PREFETCHING
# =============================================================================

def prefetch_lookups(
    components: Iterable[Component],
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup,
    max_workers: int = 8
) -> Tuple[CatalogLookup, NestedLookup]:
    """
    Run every lookup a component list needs, concurrently, up front.

    Useful when lookups are network-bound. All results are collected before
    this function returns; the returned lookups answer from the collected
    results only, so classification never sees a partial state.

    Args:
        components: Components to prefetch (pass both snapshots' lists)
        catalog_lookup: Backing catalog lookup
        nested_lookup: Backing nested-document lookup
        max_workers: Thread pool size

    Returns:
        (catalog_lookup, nested_lookup) backed by the collected results
    """
    catalog_ids: Set[str] = set()
    nested_ids: Set[str] = set()
    for component in components:
        if not component.reference_id:
            continue
        if component.kind == ComponentKind.DIRECT_REFERENCE:
            catalog_ids.add(component.reference_id)
        else:
            nested_ids.add(component.reference_id)

    catalog_results: Dict[str, Optional[CatalogAttributes]] = {}
    nested_results: Dict[str, Optional[ResolvedAttributeSet]] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        catalog_futures = {ref: executor.submit(catalog_lookup, ref) for ref in sorted(catalog_ids)}
        nested_futures = {ref: executor.submit(nested_lookup, ref) for ref in sorted(nested_ids)}

        # result() re-raises lookup failures here, before anything is returned
        for ref, future in catalog_futures.items():
            catalog_results[ref] = future.result()
        for ref, future in nested_futures.items():
            nested_results[ref] = future.result()

    return catalog_results.get, nested_results.get

"""
Change Classification for Recipe Revisions

This module implements a deterministic classifier that compares the last
saved snapshot of a recipe with the one about to be saved, and turns every
difference into a typed change with a communication tier.

ARCHITECTURE:
- Layer 1 (set_diff.py, allergen_resolver.py): Answers "What changed?"
- Layer 2 (this module): Answers "How loudly must the kitchen be told?"
- Layer 3 (versioning/): Answers "Which version bump is allowed?"

DESIGN PRINCIPLES:
1. Deterministic: Same inputs always produce the same changes, in the same order
2. Additive: Every rule runs; finding a MAJOR change never stops the battery
3. Safety floor: CONTAINS allergen changes are MAJOR and cannot be downgraded
4. Distrust caches: allergens are re-derived from the component list, not
   only read from the snapshot's cached declaration

It behaves more like a compiler than an editor.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from ..errors import DanglingComponentReference
from ..schema import (
    ChangeCategory,
    FREE_TEXT_FIELDS,
    Tier,
    format_attribute_name,
    max_tier,
)
from .allergen_resolver import (
    CatalogLookup,
    NestedLookup,
    resolve_component,
    resolve_effective,
)
from .set_diff import SetDiff, diff_ids, diff_sets, normalize_identifier, scalar_changed, text_fields_changed
from .snapshot import Component, MethodStep, Snapshot, validate_snapshot
from ..unit_normalizer import UnitNormalizer

logger = logging.getLogger(__name__)

_unit_normalizer = UnitNormalizer()


# =============================================================================
# DETECTED CHANGE (Output Type)
# =============================================================================

@dataclass
class DetectedChange:
    """
    One atomic change between two snapshots.

    Derived on every classification run and never persisted on its own.

    - suggested_tier: how loudly this change should be communicated
    - is_safety_floor: True means the operator cannot pick a lower tier
    - reason: one-line justification shown next to the suggested tier
    """
    id: str
    category: ChangeCategory
    description: str
    suggested_tier: Tier
    is_safety_floor: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "id": self.id,
            "category": self.category.value,
            "description": self.description,
            "suggested_tier": self.suggested_tier.value,
            "is_safety_floor": self.is_safety_floor,
            "reason": self.reason,
        }


@dataclass
class TierSummary:
    """Aggregate tiers of a change list."""
    suggested_tier: Tier = Tier.PATCH
    minimum_tier: Tier = Tier.PATCH
    has_safety_floor: bool = False
    rationale: str = ""


@dataclass
class ClassificationResult:
    """
    Complete result of classifying one revision.

    A pure function of (previous snapshot, current snapshot, catalog state):
    it can be re-derived at any time and has no lifecycle of its own.

    `advisories` hold non-blocking notices (dangling references). They are
    kept out of `changes`, so they never raise a tier or make an unchanged
    recipe look changed.
    """
    changes: List[DetectedChange] = field(default_factory=list)
    has_changes: bool = False
    suggested_tier: Tier = Tier.PATCH
    minimum_tier: Tier = Tier.PATCH
    has_safety_floor: bool = False
    rationale: str = ""
    advisories: List[DetectedChange] = field(default_factory=list)

    def changes_by_category(self, category: ChangeCategory) -> List[DetectedChange]:
        """Filter changes by category."""
        return [c for c in self.changes if c.category == category]

    def changes_by_tier(self, tier: Tier) -> List[DetectedChange]:
        """Filter changes by suggested tier."""
        return [c for c in self.changes if c.suggested_tier == tier]

    def safety_floor_changes(self) -> List[DetectedChange]:
        """Changes the operator cannot downgrade."""
        return [c for c in self.changes if c.is_safety_floor]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "has_changes": self.has_changes,
            "suggested_tier": self.suggested_tier.value,
            "minimum_tier": self.minimum_tier.value,
            "has_safety_floor": self.has_safety_floor,
            "rationale": self.rationale,
            "changes": [c.to_dict() for c in self.changes],
            "advisories": [a.to_dict() for a in self.advisories],
        }


# =============================================================================
# RECIPE DELTA (Canonical Abstraction)
# =============================================================================
# Reduces two snapshots into the facts the rules interpret.

@dataclass
class RecipeDelta:
    """
    Canonical representation of what changed between two snapshots.

    RecipeDelta represents FACTS, not DECISIONS.
    Classification rules interpret these facts into detected changes.
    """
    # Cached declaration diffs
    present: SetDiff = field(default_factory=SetDiff)
    possible: SetDiff = field(default_factory=SetDiff)
    cross_contact: SetDiff = field(default_factory=SetDiff)

    # Component identity diff, in snapshot order
    added_components: List[Component] = field(default_factory=list)
    removed_components: List[Component] = field(default_factory=list)

    # Present allergens contributed by each added component (by component id)
    added_component_present: Dict[str, FrozenSet[str]] = field(default_factory=dict)

    # Previous snapshot's cached CONTAINS set, normalized
    previous_present: FrozenSet[str] = frozenset()

    # Allergens re-derived from the component lists
    effective_present: SetDiff = field(default_factory=SetDiff)

    # Yield
    yield_changed: bool = False
    yield_from: Tuple[Optional[float], Optional[str]] = (None, None)
    yield_to: Tuple[Optional[float], Optional[str]] = (None, None)

    # Method
    steps_changed: bool = False
    step_count_delta: int = 0
    changed_step_numbers: List[int] = field(default_factory=list)

    # Narrative fields whose text changed
    free_text_changed: List[str] = field(default_factory=list)

    # Components whose reference did not resolve (current first, then previous-only)
    dangling: List[Component] = field(default_factory=list)

    def has_any_change(self) -> bool:
        """Returns True if any change was detected."""
        return (
            self.present.has_changes() or
            self.possible.has_changes() or
            self.cross_contact.has_changes() or
            bool(self.added_components) or
            bool(self.removed_components) or
            self.effective_present.has_changes() or
            self.yield_changed or
            self.steps_changed or
            bool(self.free_text_changed)
        )


def _components_by_id(components) -> Dict[str, Component]:
    by_id: Dict[str, Component] = {}
    for component in components:
        # First occurrence wins if an id is repeated
        by_id.setdefault(component.id, component)
    return by_id


def _step_differs(current: MethodStep, previous: MethodStep) -> bool:
    return (
        current.instruction != previous.instruction or
        current.temperature != previous.temperature or
        current.duration_minutes != previous.duration_minutes
    )


def compute_recipe_delta(
    previous: Snapshot,
    current: Snapshot,
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup,
    debug: bool = False
) -> RecipeDelta:
    """
    Compute the facts the classification rules run over.

    Args:
        previous: Last saved snapshot
        current: Snapshot about to be saved
        catalog_lookup: reference_id -> CatalogAttributes or None
        nested_lookup: document_id -> ResolvedAttributeSet or None
        debug: Log resolver decisions

    Returns:
        RecipeDelta
    """
    delta = RecipeDelta()

    # Cached allergen declaration
    prev_safety = previous.safety_attributes
    curr_safety = current.safety_attributes
    delta.present = diff_sets(curr_safety.present, prev_safety.present)
    delta.possible = diff_sets(curr_safety.possible, prev_safety.possible)
    delta.cross_contact = diff_sets(curr_safety.cross_contact, prev_safety.cross_contact)
    delta.previous_present = frozenset(normalize_identifier(p) for p in prev_safety.present)

    # Components, matched by stable identity
    prev_components = _components_by_id(previous.components)
    curr_components = _components_by_id(current.components)
    id_diff = diff_ids(curr_components.keys(), prev_components.keys())
    added_ids = set(id_diff.added)
    removed_ids = set(id_diff.removed)
    delta.added_components = [c for cid, c in curr_components.items() if cid in added_ids]
    delta.removed_components = [c for cid, c in prev_components.items() if cid in removed_ids]

    for component in delta.added_components:
        resolved = resolve_component(component, catalog_lookup, nested_lookup)
        delta.added_component_present[component.id] = resolved.present

    # Re-derive allergens from both component lists against the same catalog state
    prev_effective = resolve_effective(previous.components, catalog_lookup, nested_lookup, debug=debug)
    curr_effective = resolve_effective(current.components, catalog_lookup, nested_lookup, debug=debug)
    delta.effective_present = diff_sets(curr_effective.present, prev_effective.present)

    seen_dangling: Set[str] = set()
    for component in curr_effective.dangling + prev_effective.dangling:
        if component.id not in seen_dangling:
            seen_dangling.add(component.id)
            delta.dangling.append(component)

    # Yield
    if (
        scalar_changed(current.yield_amount, previous.yield_amount) or
        scalar_changed(current.yield_unit or "", previous.yield_unit or "")
    ):
        delta.yield_changed = True
        delta.yield_from = (previous.yield_amount, previous.yield_unit)
        delta.yield_to = (current.yield_amount, current.yield_unit)

    # Method
    curr_steps = current.method_steps
    prev_steps = previous.method_steps
    delta.step_count_delta = len(curr_steps) - len(prev_steps)
    delta.changed_step_numbers = [
        i + 1 for i, (curr_step, prev_step) in enumerate(zip(curr_steps, prev_steps))
        if _step_differs(curr_step, prev_step)
    ]
    delta.steps_changed = delta.step_count_delta != 0 or bool(delta.changed_step_numbers)

    # Narrative fields: the known ones first, then any extra keys either side carries
    extra_fields = sorted(
        (set(current.free_text) | set(previous.free_text)) - set(FREE_TEXT_FIELDS)
    )
    delta.free_text_changed = text_fields_changed(
        current.free_text,
        previous.free_text,
        list(FREE_TEXT_FIELDS) + extra_fields
    )

    return delta


# =============================================================================
# CHANGE LEDGER
# =============================================================================

class ChangeLedger:
    """
    Accumulates detected changes during one classification run.

    Besides the ordered change list it keeps `attributed_present`: the
    CONTAINS allergens already reported by a change. The reconciliation
    rule consults it instead of re-scanning change descriptions.
    """

    def __init__(self, id_prefix: str = "change"):
        self.changes: List[DetectedChange] = []
        self.attributed_present: Set[str] = set()
        self._id_prefix = id_prefix
        self._counter = 0

    def record(
        self,
        category: ChangeCategory,
        description: str,
        suggested_tier: Tier,
        reason: str,
        is_safety_floor: bool = False
    ) -> DetectedChange:
        self._counter += 1
        change = DetectedChange(
            id=f"{self._id_prefix}-{self._counter}",
            category=category,
            description=description,
            suggested_tier=suggested_tier,
            is_safety_floor=is_safety_floor,
            reason=reason,
        )
        self.changes.append(change)
        return change


# =============================================================================
# CLASSIFICATION RULES
# =============================================================================
# Ordered, explicit rules. All rules run; none short-circuits.
# Each rule is a function: (RecipeDelta, ChangeLedger) -> None

def _rule_present_allergens(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 1: CONTAINS allergens added to or removed from the declaration.

    Produces: ALLERGEN_CONTAINS (MAJOR, safety floor) per allergen.
    Removal is as serious as addition: a guest trusting a stale
    "does not contain" is exposed just the same.
    """
    for allergen in delta.present.added:
        ledger.record(
            ChangeCategory.ALLERGEN_CONTAINS,
            f"New CONTAINS allergen: {format_attribute_name(allergen)}",
            Tier.MAJOR,
            "New definite-presence hazard: customer safety, mandatory meeting required",
            is_safety_floor=True,
        )
        ledger.attributed_present.add(allergen)

    for allergen in delta.present.removed:
        ledger.record(
            ChangeCategory.ALLERGEN_CONTAINS,
            f"CONTAINS allergen removed: {format_attribute_name(allergen)}",
            Tier.MAJOR,
            "False-confidence risk: removal also requires mandatory notice",
            is_safety_floor=True,
        )
        ledger.attributed_present.add(allergen)


def _rule_possible_allergens(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 2: MAY CONTAIN allergens added or removed.

    Produces: ALLERGEN_MAY_CONTAIN (MINOR) per allergen.
    """
    for allergen in delta.possible.added:
        ledger.record(
            ChangeCategory.ALLERGEN_MAY_CONTAIN,
            f"New MAY CONTAIN: {format_attribute_name(allergen)}",
            Tier.MINOR,
            "New potential exposure: team needs awareness",
        )

    for allergen in delta.possible.removed:
        ledger.record(
            ChangeCategory.ALLERGEN_MAY_CONTAIN,
            f"MAY CONTAIN removed: {format_attribute_name(allergen)}",
            Tier.MINOR,
            "Exposure risk removed: team should review",
        )


def _rule_cross_contact(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 3: Cross-contact notes changed.

    Produces: one aggregated ALLERGEN_CROSS_CONTACT (PATCH).
    """
    if not delta.cross_contact.has_changes():
        return

    ledger.record(
        ChangeCategory.ALLERGEN_CROSS_CONTACT,
        f"Cross-contact notes updated ({len(delta.cross_contact.added)} added, "
        f"{len(delta.cross_contact.removed)} removed)",
        Tier.PATCH,
        "Cross-contact documentation change: trust management",
    )


def _rule_components(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 4: Components added or removed (by stable identity).

    Produces:
    - INGREDIENT_ADDED (MAJOR, safety floor) when the new component brings a
      CONTAINS allergen the previous declaration did not list
    - INGREDIENT_ADDED (MINOR) otherwise
    - INGREDIENT_REMOVED (MINOR); a removal that drops an allergen is caught
      by the reconciliation rule
    """
    for component in delta.added_components:
        present = delta.added_component_present.get(component.id, frozenset())
        introduces = present - delta.previous_present

        if introduces:
            names = ", ".join(format_attribute_name(a) for a in sorted(present))
            ledger.record(
                ChangeCategory.INGREDIENT_ADDED,
                f'Added "{component.display_name}" (CONTAINS: {names})',
                Tier.MAJOR,
                "New ingredient introduces a CONTAINS allergen: mandatory meeting",
                is_safety_floor=True,
            )
        else:
            ledger.record(
                ChangeCategory.INGREDIENT_ADDED,
                f'Added "{component.display_name}"',
                Tier.MINOR,
                "New ingredient: team should review",
            )

    for component in delta.removed_components:
        ledger.record(
            ChangeCategory.INGREDIENT_REMOVED,
            f'Removed "{component.display_name}"',
            Tier.MINOR,
            "Ingredient removed: team should review",
        )


def _format_amount(amount: Optional[float]) -> str:
    if amount is None:
        return "?"
    return str(int(amount)) if float(amount).is_integer() else f"{amount:g}"


def _format_yield(amount: Optional[float], unit: Optional[str]) -> str:
    return f"{_format_amount(amount)} {unit or ''}".strip()


def _rule_yield(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 5: Yield amount or unit changed.

    Produces: YIELD (MINOR). When both units measure the same dimension the
    description carries the scale factor.
    """
    if not delta.yield_changed:
        return

    description = f"Yield changed: {_format_yield(*delta.yield_from)} → {_format_yield(*delta.yield_to)}"

    factor = _unit_normalizer.scale_factor(delta.yield_from, delta.yield_to)
    if factor is not None:
        if abs(factor - 1.0) < 1e-9:
            description += " (same quantity)"
        else:
            description += f" (x{factor:.2f})"

    ledger.record(
        ChangeCategory.YIELD,
        description,
        Tier.MINOR,
        "Yield change affects portioning: team should review",
    )


def _rule_ingredient_sourced_allergens(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 6: Allergens re-derived from the component lists changed.

    The cached declaration may not have been recomputed yet when the
    operator saves (for example right after swapping an ingredient). This
    rule diffs the allergens resolved from both component lists and reports
    every CONTAINS allergen that rule 1 did not already report.

    Produces: ALLERGEN_CONTAINS (MAJOR, safety floor) per allergen.
    """
    for allergen in delta.effective_present.added:
        if allergen in ledger.attributed_present:
            continue
        ledger.record(
            ChangeCategory.ALLERGEN_CONTAINS,
            f"New ingredient-sourced allergen: {format_attribute_name(allergen)}",
            Tier.MAJOR,
            "New ingredient introduces a CONTAINS allergen: mandatory meeting",
            is_safety_floor=True,
        )
        ledger.attributed_present.add(allergen)

    for allergen in delta.effective_present.removed:
        if allergen in ledger.attributed_present:
            continue
        ledger.record(
            ChangeCategory.ALLERGEN_CONTAINS,
            f"Ingredient-sourced allergen lost: {format_attribute_name(allergen)}",
            Tier.MAJOR,
            "Removed ingredient was the source of a CONTAINS allergen: mandatory meeting",
            is_safety_floor=True,
        )
        ledger.attributed_present.add(allergen)


def _rule_method(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 7: Method steps changed (count, instruction, temperature or time).

    Produces: one aggregated METHOD (MINOR).
    """
    if not delta.steps_changed:
        return

    count = delta.step_count_delta
    if count:
        noun = "step" if abs(count) == 1 else "steps"
        description = f"Method steps changed ({count:+d} {noun})"
    else:
        description = "Method steps modified"

    if delta.changed_step_numbers:
        numbers = ", ".join(str(n) for n in delta.changed_step_numbers)
        label = "step" if len(delta.changed_step_numbers) == 1 else "steps"
        description += f": {label} {numbers} edited"

    ledger.record(
        ChangeCategory.METHOD,
        description,
        Tier.MINOR,
        "Method change affects technique: team should review",
    )


def _join_names(names: List[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _rule_free_text(delta: RecipeDelta, ledger: ChangeLedger) -> None:
    """
    Rule 8: Narrative fields changed.

    Produces: one aggregated NOTES (PATCH).
    """
    if not delta.free_text_changed:
        return

    names = [FREE_TEXT_FIELDS.get(f, f.replace("_", " ")) for f in delta.free_text_changed]
    ledger.record(
        ChangeCategory.NOTES,
        f"Updated {_join_names(names)}",
        Tier.PATCH,
        "Documentation change: trust management, silent update",
    )


# Ordered list of classification rules
# CRITICAL: Order matters
# - Rule 6 reads the allergens attributed by rule 1
# - The rationale is taken from the first change at the top tier
CLASSIFICATION_RULES = [
    _rule_present_allergens,
    _rule_possible_allergens,
    _rule_cross_contact,
    _rule_components,
    _rule_yield,
    _rule_ingredient_sourced_allergens,
    _rule_method,
    _rule_free_text,
]


def _advisories_for(delta: RecipeDelta, strict_references: bool = False) -> List[DetectedChange]:
    advisories = ChangeLedger(id_prefix="advisory")
    for component in delta.dangling:
        if strict_references:
            raise DanglingComponentReference(component.id, component.reference_id, component.kind.value)
        target = component.reference_id or "no reference"
        logger.warning(
            f"Dangling reference: component {component.id} ({component.kind.value}) -> {target}"
        )
        advisories.record(
            ChangeCategory.DANGLING_REFERENCE,
            f'"{component.display_name}" could not be resolved ({target}); '
            f"its allergens are not included",
            Tier.PATCH,
            "Unresolved ingredient reference: verify the ingredient before relying on allergen data",
        )
    return advisories.changes


# =============================================================================
# TIER AGGREGATION
# =============================================================================

def aggregate_tiers(changes: List[DetectedChange]) -> TierSummary:
    """
    Reduce a change list to one suggested tier and one mandatory minimum.

    - suggested_tier: highest tier of any change (PATCH when empty)
    - minimum_tier: highest tier of any safety-floor change (PATCH when none)
    - rationale: reason of the first change at the suggested tier, in rule
      evaluation order

    Because the minimum is taken over a subset of the changes, the
    suggested tier can never be below it.

    Args:
        changes: Changes in rule evaluation order

    Returns:
        TierSummary
    """
    suggested = Tier.PATCH
    minimum = Tier.PATCH

    for change in changes:
        suggested = max_tier(suggested, change.suggested_tier)
        if change.is_safety_floor:
            minimum = max_tier(minimum, change.suggested_tier)

    rationale = ""
    for change in changes:
        if change.suggested_tier == suggested:
            rationale = change.reason
            break

    return TierSummary(
        suggested_tier=suggested,
        minimum_tier=minimum,
        has_safety_floor=minimum.rank > Tier.PATCH.rank,
        rationale=rationale,
    )


# =============================================================================
# MAIN CLASSIFICATION FUNCTION
# =============================================================================

def classify_changes(
    previous: Optional[Snapshot],
    current: Snapshot,
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup,
    strict_references: bool = False,
    debug: bool = False
) -> ClassificationResult:
    """
    Classify the changes between the last saved snapshot and the current one.

    The function:
    1. Validates both snapshots (a malformed one aborts the whole call)
    2. Computes a RecipeDelta (the facts)
    3. Runs every classification rule, in order
    4. Aggregates tiers into a suggestion, a safety floor and a rationale

    A recipe that has never been saved (previous is None) has nothing to
    compare against and yields an empty result.

    Args:
        previous: Last saved snapshot, or None for a new recipe
        current: Snapshot about to be saved
        catalog_lookup: reference_id -> CatalogAttributes or None
        nested_lookup: document_id -> ResolvedAttributeSet or None
        strict_references: Raise on a dangling reference instead of
            reporting an advisory
        debug: Log every detected change

    Returns:
        ClassificationResult

    Raises:
        MalformedSnapshot: If either snapshot is missing a required structure
        DanglingComponentReference: If strict_references is set and a
            component reference does not resolve

    Example:
        >>> result = classify_changes(saved, edited, catalog.catalog_lookup, catalog.nested_lookup)
        >>> for change in result.changes:
        ...     print(f"{change.suggested_tier.value}: {change.description}")
    """
    validate_snapshot(current, "current")
    if previous is None:
        if debug:
            logger.info(f"No saved version of {current.label}; nothing to classify")
        return ClassificationResult()
    validate_snapshot(previous, "previous")

    delta = compute_recipe_delta(previous, current, catalog_lookup, nested_lookup, debug=debug)

    ledger = ChangeLedger()
    for rule in CLASSIFICATION_RULES:
        rule(delta, ledger)

    summary = aggregate_tiers(ledger.changes)
    advisories = _advisories_for(delta, strict_references)

    if debug:
        for change in ledger.changes:
            logger.info(
                f"{change.id} [{change.category.value}] {change.suggested_tier.value}"
                f"{' (safety floor)' if change.is_safety_floor else ''}: {change.description}"
            )
        logger.info(
            f"Classified {current.label}: {len(ledger.changes)} changes, "
            f"suggested={summary.suggested_tier.value}, minimum={summary.minimum_tier.value}"
        )

    return ClassificationResult(
        changes=ledger.changes,
        has_changes=bool(ledger.changes),
        suggested_tier=summary.suggested_tier,
        minimum_tier=summary.minimum_tier,
        has_safety_floor=summary.has_safety_floor,
        rationale=summary.rationale,
        advisories=advisories,
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def classify_and_summarize(
    previous: Optional[Snapshot],
    current: Snapshot,
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup
) -> Dict[str, Any]:
    """
    Classify a revision and produce a summary dictionary.

    This is a convenience function for quick inspection and debugging.

    Returns:
        Dictionary with classification summary
    """
    result = classify_changes(previous, current, catalog_lookup, nested_lookup)

    by_category: Dict[str, int] = {}
    for change in result.changes:
        name = change.category.value
        by_category[name] = by_category.get(name, 0) + 1

    by_tier: Dict[str, int] = {}
    for change in result.changes:
        name = change.suggested_tier.value
        by_tier[name] = by_tier.get(name, 0) + 1

    return {
        "total_changes": len(result.changes),
        "changes_by_category": by_category,
        "changes_by_tier": by_tier,
        "suggested_tier": result.suggested_tier.value,
        "minimum_tier": result.minimum_tier.value,
        "safety_floor_count": len(result.safety_floor_changes()),
        "advisory_count": len(result.advisories),
        "rationale": result.rationale,
        "changes": [c.to_dict() for c in result.changes],
    }


def get_safety_floor_changes(
    previous: Optional[Snapshot],
    current: Snapshot,
    catalog_lookup: CatalogLookup,
    nested_lookup: NestedLookup
) -> List[DetectedChange]:
    """
    Get only the changes that lock the version tier.

    This is useful for alerts: every one of these requires a mandatory
    meeting.
    """
    result = classify_changes(previous, current, catalog_lookup, nested_lookup)
    return result.safety_floor_changes()

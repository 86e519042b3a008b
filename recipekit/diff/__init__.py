"""Recipe snapshot diff module for classifying changes between revisions."""

from .set_diff import (
    SetDiff,
    diff_sets,
    diff_ids,
    normalize_identifier,
    scalar_changed,
    text_fields_changed,
)

from .snapshot import (
    Snapshot,
    SafetyAttributes,
    Component,
    ComponentKind,
    MethodStep,
    Temperature,
    Version,
    AuditEntry,
    snapshot_from_dict,
    validate_snapshot,
)

from .allergen_resolver import (
    CatalogAttributes,
    CustomAllergen,
    ResolvedAttributeSet,
    ComponentAttributes,
    EffectiveAttributes,
    CatalogLookup,
    NestedLookup,
    catalog_attributes_from_record,
    resolve_component,
    resolve_effective,
    resolve_effective_present,
    prefetch_lookups,
)

from .change_events import (
    # Main classification function
    classify_changes,
    classify_and_summarize,
    get_safety_floor_changes,
    aggregate_tiers,
    compute_recipe_delta,
    # Data classes
    DetectedChange,
    TierSummary,
    ClassificationResult,
    RecipeDelta,
)

__all__ = [
    # Layer 1: Set/scalar diff and allergen resolution
    "SetDiff",
    "diff_sets",
    "diff_ids",
    "normalize_identifier",
    "scalar_changed",
    "text_fields_changed",
    "CatalogAttributes",
    "CustomAllergen",
    "ResolvedAttributeSet",
    "ComponentAttributes",
    "EffectiveAttributes",
    "CatalogLookup",
    "NestedLookup",
    "catalog_attributes_from_record",
    "resolve_component",
    "resolve_effective",
    "resolve_effective_present",
    "prefetch_lookups",
    # Snapshot model
    "Snapshot",
    "SafetyAttributes",
    "Component",
    "ComponentKind",
    "MethodStep",
    "Temperature",
    "Version",
    "AuditEntry",
    "snapshot_from_dict",
    "validate_snapshot",
    # Layer 2: Change classification
    "classify_changes",
    "classify_and_summarize",
    "get_safety_floor_changes",
    "aggregate_tiers",
    "compute_recipe_delta",
    "DetectedChange",
    "TierSummary",
    "ClassificationResult",
    "RecipeDelta",
]

from .diff import (
    classify_changes,
    ClassificationResult,
    DetectedChange,
    Snapshot,
    Version,
    snapshot_from_dict,
    prefetch_lookups,
)
from .versioning import bump_version, commit_version, VersionBumpResult
from .catalog import CatalogClient, InMemoryCatalog, SupabaseCatalogClient
from .schema import Allergen, Tier, RecipeStatus, ChangeCategory
from .errors import MalformedSnapshot, InvalidVersionTransition, DanglingComponentReference

__all__ = [
    "classify_changes", "ClassificationResult", "DetectedChange", "Snapshot", "Version",
    "snapshot_from_dict", "prefetch_lookups",
    "bump_version", "commit_version", "VersionBumpResult",
    "CatalogClient", "InMemoryCatalog", "SupabaseCatalogClient",
    "Allergen", "Tier", "RecipeStatus", "ChangeCategory",
    "MalformedSnapshot", "InvalidVersionTransition", "DanglingComponentReference",
]

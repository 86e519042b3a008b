#!/usr/bin/env python3
"""Example: classify a recipe revision and commit the version bump.

Runs entirely in memory: the catalog is an InMemoryCatalog, and the two
snapshots are built from the record shape the storage layer persists.
"""

import logging

from recipekit import InMemoryCatalog, classify_changes, commit_version, snapshot_from_dict
from recipekit.errors import InvalidVersionTransition
from recipekit.schema import Tier
from recipekit.versioning import permitted_tiers, preview_next_versions


CATALOG = InMemoryCatalog(
    catalog_records={
        "mi-flour": {"allergen_gluten": True, "allergen_wheat": True},
        "mi-butter": {"allergen_milk": True},
        "mi-oil": {},
        "mi-pistachio": {"allergen_treenut": True, "allergen_peanut_may_contain": True},
    },
)

SAVED = {
    "id": "rec-shortbread",
    "name": "Shortbread",
    "allergenInfo": {"contains": ["gluten", "wheat", "milk"], "mayContain": [], "crossContactRisk": []},
    "ingredients": [
        {"id": "i1", "ingredient_type": "raw", "master_ingredient_id": "mi-flour", "ingredient_name": "Flour"},
        {"id": "i2", "ingredient_type": "raw", "master_ingredient_id": "mi-butter", "ingredient_name": "Butter"},
    ],
    "yield_amount": 24,
    "yield_unit": "portions",
    "steps": [
        {"instruction": "Cream butter and sugar", "time_in_minutes": 5},
        {"instruction": "Bake", "temperature": {"value": 325, "unit": "F"}, "time_in_minutes": 20},
    ],
    "description": "Classic butter shortbread",
    "version": "1.2.3",
    "status": "approved",
}

EDITED = {
    **SAVED,
    # The cached declaration has not been recomputed yet
    "ingredients": [
        {"id": "i1", "ingredient_type": "raw", "master_ingredient_id": "mi-flour", "ingredient_name": "Flour"},
        {"id": "i3", "ingredient_type": "raw", "master_ingredient_id": "mi-oil", "ingredient_name": "Olive Oil"},
        {"id": "i4", "ingredient_type": "raw", "master_ingredient_id": "mi-pistachio", "ingredient_name": "Pistachio"},
    ],
    "yield_amount": 30,
    "description": "Olive oil and pistachio shortbread",
}


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    previous = snapshot_from_dict(SAVED)
    current = snapshot_from_dict(EDITED)

    result = classify_changes(previous, current, CATALOG.catalog_lookup, CATALOG.nested_lookup)

    print(f"📋 {current.label} v{current.version}: {len(result.changes)} changes")
    for change in result.changes:
        floor = " 🔒" if change.is_safety_floor else ""
        print(f"  [{change.suggested_tier.label}]{floor} {change.description}")
    for advisory in result.advisories:
        print(f"  ⚠️  {advisory.description}")
    print()
    print(f"Suggested: {result.suggested_tier.label} ({result.rationale})")
    print(f"Minimum:   {result.minimum_tier.label}")

    previews = preview_next_versions(current.version)
    for tier in permitted_tiers(result):
        print(f"  {tier.label}: v{previews[tier]} ({tier.communication})")
    print()

    try:
        commit_version(current, result, Tier.MINOR, "Swapped butter for oil", "pastry@kitchen")
    except InvalidVersionTransition as e:
        print(f"❌ {e}")

    committed, bump = commit_version(
        current, result, Tier.MAJOR,
        "Butter replaced with olive oil; now contains pistachio (tree nut)",
        "pastry@kitchen",
    )
    print(f"✓ Committed v{committed.version} ({bump.announcement}), status: {committed.status.label}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Example: classify a revision against the live Supabase catalog.

Usage:
    python classify_from_supabase.py <saved.json> <edited.json>

Both files hold recipe records as stored in the recipes table. Connection
settings come from SUPABASE_DB_URL (or the SUPABASE_DB_* variables), which
may be kept in a .env file next to the project root.
"""

import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from recipekit import SupabaseCatalogClient, classify_changes, snapshot_from_dict

project_root = Path(__file__).resolve().parent.parent
load_dotenv(project_root / ".env")


def load_snapshot(path: str):
    with open(path) as f:
        return snapshot_from_dict(json.load(f))


def main():
    if len(sys.argv) < 3:
        print("Usage: python classify_from_supabase.py <saved.json> <edited.json>")
        sys.exit(1)

    previous = load_snapshot(sys.argv[1])
    current = load_snapshot(sys.argv[2])

    catalog = SupabaseCatalogClient()

    try:
        # Two batch queries instead of one query per ingredient
        catalog_lookup, nested_lookup = catalog.prefetch(previous.components + current.components)
        result = classify_changes(previous, current, catalog_lookup, nested_lookup)

        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    finally:
        catalog.close()


if __name__ == "__main__":
    main()

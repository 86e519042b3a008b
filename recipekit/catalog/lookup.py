"""
Catalog lookup interface.

Change classification needs two read-only capabilities:
- catalog_lookup(item_id) -> CatalogAttributes or None
- nested_lookup(recipe_id) -> ResolvedAttributeSet or None

CatalogClient adapts a record store to those capabilities. Implement the two
record methods with your actual store; the adapters decode records into the
resolver's types.
"""

from typing import Any, Dict, Mapping, Optional

from ..diff.allergen_resolver import (
    CatalogAttributes,
    ResolvedAttributeSet,
    catalog_attributes_from_record,
)


def resolved_attributes_from_info(info: Optional[Mapping[str, Any]]) -> Optional[ResolvedAttributeSet]:
    """
    Decode a recipe's stored allergen declaration ({"contains", "mayContain"}).

    Args:
        info: Stored declaration (None when the recipe does not exist)

    Returns:
        ResolvedAttributeSet, or None if info is None
    """
    if info is None:
        return None
    return ResolvedAttributeSet(
        present=frozenset(info.get("contains") or []),
        possible=frozenset(info.get("mayContain") or []),
    )


class CatalogClient:
    """
    Abstract catalog client interface.

    Both record methods return None for unknown ids; they must not raise for
    a missing record.
    """

    def get_catalog_record(self, item_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a catalog item's boolean-coded allergen record.

        Args:
            item_id: Catalog item id

        Returns:
            Record with allergen_* columns, or None if not found
        """
        raise NotImplementedError

    def get_allergen_info(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a recipe's stored allergen declaration.

        Args:
            recipe_id: Recipe id

        Returns:
            {"contains": [...], "mayContain": [...]} or None if not found
        """
        raise NotImplementedError

    def catalog_lookup(self, item_id: str) -> Optional[CatalogAttributes]:
        """Catalog lookup capability for the classifier."""
        return catalog_attributes_from_record(self.get_catalog_record(item_id))

    def nested_lookup(self, recipe_id: str) -> Optional[ResolvedAttributeSet]:
        """Nested-document lookup capability for the classifier."""
        return resolved_attributes_from_info(self.get_allergen_info(recipe_id))


class InMemoryCatalog(CatalogClient):
    """
    Catalog backed by dictionaries.

    Useful for tests and for callers that already hold the catalog in memory.
    """

    def __init__(
        self,
        catalog_records: Optional[Mapping[str, Mapping[str, Any]]] = None,
        allergen_info: Optional[Mapping[str, Mapping[str, Any]]] = None
    ):
        self.catalog_records: Dict[str, Dict[str, Any]] = {
            str(k): dict(v) for k, v in (catalog_records or {}).items()
        }
        self.allergen_info: Dict[str, Dict[str, Any]] = {
            str(k): dict(v) for k, v in (allergen_info or {}).items()
        }

    def get_catalog_record(self, item_id: str) -> Optional[Dict[str, Any]]:
        return self.catalog_records.get(item_id)

    def get_allergen_info(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        return self.allergen_info.get(recipe_id)

"""Catalog lookup clients feeding the allergen resolver."""

from .lookup import CatalogClient, InMemoryCatalog, resolved_attributes_from_info
from .supabase_client import SupabaseCatalogClient

__all__ = ["CatalogClient", "InMemoryCatalog", "SupabaseCatalogClient", "resolved_attributes_from_info"]

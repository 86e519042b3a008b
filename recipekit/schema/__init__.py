"""Recipe schema definitions: allergen enumeration, tiers, statuses and change categories."""

from enum import Enum
from typing import Dict


class Allergen(Enum):
    """
    Standard allergen attributes tracked on every catalog item.

    The value is the canonical attribute key used in snapshots and in the
    boolean-coded catalog columns (allergen_<value>, allergen_<value>_may_contain).
    """
    PEANUT = "peanut"
    CRUSTACEAN = "crustacean"
    TREENUT = "treenut"
    SHELLFISH = "shellfish"
    SESAME = "sesame"
    SOY = "soy"
    FISH = "fish"
    WHEAT = "wheat"
    MILK = "milk"
    SULPHITE = "sulphite"
    EGG = "egg"
    GLUTEN = "gluten"
    MUSTARD = "mustard"
    CELERY = "celery"
    GARLIC = "garlic"
    ONION = "onion"
    NITRITE = "nitrite"
    MUSHROOM = "mushroom"
    HOT_PEPPER = "hot_pepper"
    CITRUS = "citrus"
    PORK = "pork"

    @property
    def label(self) -> str:
        return ALLERGEN_LABELS[self]


ALLERGEN_LABELS: Dict[Allergen, str] = {
    Allergen.PEANUT: "Peanut",
    Allergen.CRUSTACEAN: "Crustacean",
    Allergen.TREENUT: "Tree Nut",
    Allergen.SHELLFISH: "Shellfish",
    Allergen.SESAME: "Sesame",
    Allergen.SOY: "Soy",
    Allergen.FISH: "Fish",
    Allergen.WHEAT: "Wheat",
    Allergen.MILK: "Milk",
    Allergen.SULPHITE: "Sulphite",
    Allergen.EGG: "Egg",
    Allergen.GLUTEN: "Gluten",
    Allergen.MUSTARD: "Mustard",
    Allergen.CELERY: "Celery",
    Allergen.GARLIC: "Garlic",
    Allergen.ONION: "Onion",
    Allergen.NITRITE: "Nitrite",
    Allergen.MUSHROOM: "Mushroom",
    Allergen.HOT_PEPPER: "Hot Pepper",
    Allergen.CITRUS: "Citrus",
    Allergen.PORK: "Pork",
}

# Operator-defined allergen slots on each catalog item (custom1..custom3)
CUSTOM_ALLERGEN_SLOTS = 3


def format_attribute_name(key: str) -> str:
    """
    Format an attribute key for display (peanut -> Peanut, treenut -> Tree Nut).

    Custom attribute names fall back to a capitalised form of the key.
    """
    try:
        return Allergen(key).label
    except ValueError:
        return key[:1].upper() + key[1:]


# =============================================================================
# TIERS
# =============================================================================

class Tier(Enum):
    """
    Communication tier of a change, and the version part it bumps.

    - PATCH: silent update, documentation only
    - MINOR: broadcast review, the team is notified
    - MAJOR: mandatory meeting and re-acknowledgment
    """
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def communication(self) -> str:
        return TIER_COMMUNICATION[self]

    @property
    def announcement(self) -> str:
        return TIER_ANNOUNCEMENT[self]

    @classmethod
    def from_rank(cls, rank: int) -> "Tier":
        return RANK_TO_TIER[rank]


TIER_RANK: Dict[Tier, int] = {Tier.PATCH: 0, Tier.MINOR: 1, Tier.MAJOR: 2}
RANK_TO_TIER = [Tier.PATCH, Tier.MINOR, Tier.MAJOR]

TIER_COMMUNICATION: Dict[Tier, str] = {
    Tier.PATCH: "Trust management, silent",
    Tier.MINOR: "Broadcast review, team notified",
    Tier.MAJOR: "Mandatory meeting + re-acknowledgment",
}

TIER_ANNOUNCEMENT: Dict[Tier, str] = {
    Tier.PATCH: "Silent update",
    Tier.MINOR: "Team will be notified",
    Tier.MAJOR: "Mandatory meeting required",
}


def max_tier(a: Tier, b: Tier) -> Tier:
    """Return the higher-ranked of two tiers (ties return the first)."""
    return a if a.rank >= b.rank else b


# =============================================================================
# WORKFLOW STATUS
# =============================================================================

class RecipeStatus(Enum):
    """Workflow state of a recipe document."""
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return STATUS_DESCRIPTIONS[self]


STATUS_DESCRIPTIONS: Dict[RecipeStatus, str] = {
    RecipeStatus.DRAFT: "Being developed and tested. Not ready for kitchen use.",
    RecipeStatus.REVIEW: "Ready for review by management or head chef.",
    RecipeStatus.APPROVED: "Finalized and approved for kitchen production.",
    RecipeStatus.ARCHIVED: "No longer in active use but kept for reference.",
}


# =============================================================================
# CHANGE CATEGORIES
# =============================================================================

class ChangeCategory(Enum):
    """Category of a detected change, one per classification rule family."""
    ALLERGEN_CONTAINS = "allergen-contains"
    ALLERGEN_MAY_CONTAIN = "allergen-maycontain"
    ALLERGEN_CROSS_CONTACT = "allergen-crosscontact"
    INGREDIENT_ADDED = "ingredient-added"
    INGREDIENT_REMOVED = "ingredient-removed"
    YIELD = "yield"
    METHOD = "method"
    NOTES = "notes"
    DANGLING_REFERENCE = "reference-dangling"


# Narrative fields compared by the free-text rule, with their display names
FREE_TEXT_FIELDS: Dict[str, str] = {
    "description": "description",
    "production_notes": "production notes",
}


__all__ = [
    "Allergen",
    "ALLERGEN_LABELS",
    "CUSTOM_ALLERGEN_SLOTS",
    "format_attribute_name",
    "Tier",
    "TIER_RANK",
    "RANK_TO_TIER",
    "max_tier",
    "RecipeStatus",
    "ChangeCategory",
    "FREE_TEXT_FIELDS",
]

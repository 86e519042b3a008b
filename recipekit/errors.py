"""
Error taxonomy for recipe change classification and version bumps.

All errors derive from ValueError: they describe bad input (a malformed
snapshot, a forbidden tier choice), not infrastructure failures.
"""

from typing import Optional


class RecipeKitError(ValueError):
    """Base class for recipekit validation errors."""


class MalformedSnapshot(RecipeKitError):
    """
    A snapshot is missing a required structural field.

    Fatal to the whole classification call: no partial result is returned.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidVersionTransition(RecipeKitError):
    """
    The requested version bump is not permitted.

    Raised when the chosen tier ranks below the safety floor, or when a
    major bump is requested without notes. Classification stays valid;
    the caller re-prompts with a corrected tier or notes.
    """

    def __init__(self, message: str, chosen_tier=None, minimum_tier=None):
        super().__init__(message)
        self.chosen_tier = chosen_tier
        self.minimum_tier = minimum_tier


class DanglingComponentReference(RecipeKitError):
    """
    A component references a catalog item or nested document that a lookup
    could not find.

    By default the classifier reports an advisory instead of raising;
    it raises only when called with strict_references=True.
    """

    def __init__(self, component_id: str, reference_id: Optional[str], kind: str):
        super().__init__(
            f"Component {component_id} ({kind}) references "
            f"{reference_id or 'nothing'}, which could not be resolved"
        )
        self.component_id = component_id
        self.reference_id = reference_id
        self.kind = kind


class InvalidStatusTransition(RecipeKitError):
    """A workflow status change was requested to the status already in force."""

"""
Set and scalar differ for recipe snapshots.

Two comparison modes:
- Natural-language identifiers (allergen keys, cross-contact notes) are
  compared case-insensitively after trimming whitespace.
- Opaque ids (component identities) are compared by exact match.

Outputs are sorted so the same inputs always produce the same change order.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional


@dataclass
class SetDiff:
    """Members added to and removed from a set between two snapshots."""
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        return bool(self.added or self.removed)


def normalize_identifier(value: str) -> str:
    """Canonical form of a natural-language identifier (lowercase, trimmed)."""
    return value.strip().lower()


def diff_sets(current: Iterable[str], previous: Iterable[str]) -> SetDiff:
    """
    Diff two sets of natural-language identifiers.

    Comparison is case-insensitive and whitespace-trimmed; the reported
    members are in normalized form. Empty identifiers are ignored.

    Args:
        current: Identifiers in the current (unsaved) snapshot
        previous: Identifiers in the previous (saved) snapshot

    Returns:
        SetDiff with sorted added and removed identifiers
    """
    current_set = {normalize_identifier(v) for v in current if v and v.strip()}
    previous_set = {normalize_identifier(v) for v in previous if v and v.strip()}

    return SetDiff(
        added=sorted(current_set - previous_set),
        removed=sorted(previous_set - current_set),
    )


def diff_ids(current: Iterable[str], previous: Iterable[str]) -> SetDiff:
    """
    Diff two sets of opaque ids by exact match.

    Args:
        current: Ids in the current snapshot
        previous: Ids in the previous snapshot

    Returns:
        SetDiff with sorted added and removed ids
    """
    current_set = set(current)
    previous_set = set(previous)

    return SetDiff(
        added=sorted(current_set - previous_set),
        removed=sorted(previous_set - current_set),
    )


def scalar_changed(current: Any, previous: Any) -> bool:
    """
    Compare two scalar field values.

    Text fields treat None and "" as the same (an unset narrative field is
    an empty one). Everything else compares by equality.
    """
    if isinstance(current, str) or isinstance(previous, str):
        return (current or "") != (previous or "")
    return current != previous


def text_fields_changed(
    current: Mapping[str, Optional[str]],
    previous: Mapping[str, Optional[str]],
    fields: Iterable[str]
) -> List[str]:
    """
    Return the names of the narrative fields whose text differs.

    Fields are reported in the order given.
    """
    return [
        name for name in fields
        if scalar_changed(current.get(name) or "", previous.get(name) or "")
    ]

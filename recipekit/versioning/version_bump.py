"""
Version bump engine for recipe revisions.

Turns a classification into a committed version:

    classify_changes()  ->  ClassificationResult (suggested + minimum tier)
    bump_version()      ->  VersionBumpResult (next version, audit entry, status)
    apply_version_bump()->  new Snapshot

This is the enforcement point of the safety floor. The classifier only
suggests; bump_version refuses any tier below the minimum, so a CONTAINS
allergen change can never go out as a silent patch.

Key principles:
- Never mutate past data: audit history is append-only
- The audit entry archives the version being superseded, not the new one
- Every call is a real commit; calling twice bumps twice
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from ..diff.change_events import ClassificationResult
from ..diff.snapshot import AuditEntry, Snapshot, Version, utc_now
from ..errors import InvalidStatusTransition, InvalidVersionTransition
from ..schema import RecipeStatus, Tier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionBumpResult:
    """
    Outcome of one committed version bump.

    status_override is RecipeStatus.DRAFT for MINOR and MAJOR bumps (any
    change the team must hear about forces a new review) and None for
    PATCH bumps, which leave the status alone.
    """
    new_version: Version
    new_audit_entry: AuditEntry
    status_override: Optional[RecipeStatus] = None

    @property
    def announcement(self) -> str:
        return self.new_audit_entry.tier.announcement

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "new_version": str(self.new_version),
            "new_audit_entry": self.new_audit_entry.to_dict(),
            "status_override": self.status_override.value if self.status_override else None,
        }


def _coerce_tier(tier: Union[Tier, str]) -> Tier:
    if isinstance(tier, Tier):
        return tier
    try:
        return Tier(str(tier).strip().lower())
    except ValueError as e:
        raise InvalidVersionTransition(f"Unknown tier {tier!r}", chosen_tier=tier) from e


def _coerce_version(version: Union[Version, str, None]) -> Version:
    if isinstance(version, Version):
        return version
    return Version.parse(version)


def check_transition(
    chosen_tier: Union[Tier, str],
    notes: Optional[str],
    minimum_tier: Union[Tier, str]
) -> None:
    """
    Validate a tier choice against the safety floor and the notes rule.

    Raises:
        InvalidVersionTransition: If chosen_tier ranks below minimum_tier,
            or a MAJOR bump has no notes, or either tier is unknown
    """
    chosen_tier = _coerce_tier(chosen_tier)
    minimum_tier = _coerce_tier(minimum_tier)

    if chosen_tier.rank < minimum_tier.rank:
        raise InvalidVersionTransition(
            f"A {chosen_tier.value} bump is below the required minimum tier "
            f"'{minimum_tier.value}' for these changes",
            chosen_tier=chosen_tier,
            minimum_tier=minimum_tier,
        )

    if chosen_tier == Tier.MAJOR and not (notes or "").strip():
        raise InvalidVersionTransition(
            "A major bump requires notes explaining the change",
            chosen_tier=chosen_tier,
            minimum_tier=minimum_tier,
        )


def bump_version(
    current_version: Union[Version, str],
    chosen_tier: Union[Tier, str],
    notes: Optional[str],
    author: str,
    minimum_tier: Union[Tier, str],
    timestamp: Optional[datetime] = None,
    status: Optional[RecipeStatus] = None,
    debug: bool = False
) -> VersionBumpResult:
    """
    Compute the next version of a recipe.

    Transitions:
    - MAJOR: (M, m, p) -> (M+1, 0, 0)
    - MINOR: (M, m, p) -> (M, m+1, 0)
    - PATCH: (M, m, p) -> (M, m, p+1)

    Args:
        current_version: Version in force before the bump
        chosen_tier: Tier picked by the operator
        notes: Operator's notes (required for MAJOR)
        author: Identifier of the committing user
        minimum_tier: Safety floor from the classification (required)
        timestamp: Commit time (defaults to now, UTC)
        status: Workflow status in force before the bump, archived with the entry
        debug: Log the transition

    Returns:
        VersionBumpResult

    Raises:
        InvalidVersionTransition: If the tier is below the floor, or a MAJOR
            bump has no notes, or either tier is unknown
    """
    tier = _coerce_tier(chosen_tier)
    version = _coerce_version(current_version)

    try:
        check_transition(tier, notes, minimum_tier)
    except InvalidVersionTransition as e:
        logger.warning(f"Version bump from {version} rejected: {e}")
        raise

    new_version = version.bump(tier)
    entry = AuditEntry(
        version=version,
        timestamp=timestamp or utc_now(),
        author=author,
        notes=notes or "",
        tier=tier,
        status=status,
    )
    status_override = RecipeStatus.DRAFT if tier != Tier.PATCH else None

    if debug:
        logger.info(
            f"Version bump: {version} -> {new_version} ({tier.value}, by {author})"
            f"{'; status reset to draft' if status_override else ''}"
        )

    return VersionBumpResult(
        new_version=new_version,
        new_audit_entry=entry,
        status_override=status_override,
    )


def apply_version_bump(snapshot: Snapshot, result: VersionBumpResult) -> Snapshot:
    """
    Return a copy of the snapshot with a bump applied.

    The audit entry is appended (history is oldest first); existing entries
    are carried over untouched.
    """
    return replace(
        snapshot,
        version=result.new_version,
        audit_history=tuple(snapshot.audit_history) + (result.new_audit_entry,),
        status=result.status_override or snapshot.status,
    )


def commit_version(
    snapshot: Snapshot,
    classification: ClassificationResult,
    chosen_tier: Union[Tier, str],
    notes: Optional[str],
    author: str,
    timestamp: Optional[datetime] = None,
    debug: bool = False
) -> Tuple[Snapshot, VersionBumpResult]:
    """
    Bump a snapshot's version under the floor of its classification.

    Args:
        snapshot: Current (unsaved) snapshot
        classification: Result of classify_changes for this snapshot
        chosen_tier: Tier picked by the operator
        notes: Operator's notes
        author: Identifier of the committing user
        timestamp: Commit time (defaults to now, UTC)
        debug: Log the transition

    Returns:
        (updated snapshot, VersionBumpResult)

    Raises:
        InvalidVersionTransition: See bump_version
    """
    result = bump_version(
        current_version=snapshot.version,
        chosen_tier=chosen_tier,
        notes=notes,
        author=author,
        minimum_tier=classification.minimum_tier,
        timestamp=timestamp,
        status=snapshot.status,
        debug=debug,
    )
    return apply_version_bump(snapshot, result), result


# =============================================================================
# COMMIT HELPERS
# =============================================================================
# Read-only helpers for the editing UI: what each tier would produce, which
# tiers are selectable, and whether the commit action is enabled.

def preview_next_versions(current_version: Union[Version, str]) -> Dict[Tier, Version]:
    """Next version for each tier."""
    version = _coerce_version(current_version)
    return {tier: version.bump(tier) for tier in Tier}


def permitted_tiers(classification: ClassificationResult) -> List[Tier]:
    """Tiers at or above the classification's minimum, lowest first."""
    return [tier for tier in Tier if tier.rank >= classification.minimum_tier.rank]


def can_commit(
    classification: ClassificationResult,
    chosen_tier: Union[Tier, str, None],
    notes: Optional[str]
) -> bool:
    """
    Whether the commit action should be enabled.

    Requires detected changes, a tier at or above the safety floor (the
    suggested tier when none is chosen), and notes for a MAJOR bump.
    """
    if not classification.has_changes:
        return False

    try:
        tier = _coerce_tier(chosen_tier) if chosen_tier is not None else classification.suggested_tier
        check_transition(tier, notes, classification.minimum_tier)
    except InvalidVersionTransition:
        return False
    return True


# =============================================================================
# WORKFLOW STATUS
# =============================================================================

@dataclass(frozen=True)
class StatusUpdate:
    """
    Field updates for a workflow status change.

    Approving stamps approved_by/approved_at; sending to review stamps
    last_reviewed_by/last_reviewed_at. Every change stamps modified_by and
    updated_at.
    """
    status: RecipeStatus
    modified_by: str
    updated_at: datetime
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    last_reviewed_by: Optional[str] = None
    last_reviewed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the stamped fields only."""
        updates: Dict[str, Any] = {
            "status": self.status.value,
            "modified_by": self.modified_by,
            "updated_at": self.updated_at.isoformat(),
        }
        if self.approved_by is not None:
            updates["approved_by"] = self.approved_by
            updates["approved_at"] = self.approved_at.isoformat()
        if self.last_reviewed_by is not None:
            updates["last_reviewed_by"] = self.last_reviewed_by
            updates["last_reviewed_at"] = self.last_reviewed_at.isoformat()
        return updates


def change_status(
    current_status: RecipeStatus,
    new_status: RecipeStatus,
    actor: str,
    timestamp: Optional[datetime] = None
) -> StatusUpdate:
    """
    Compute the field updates for a manual workflow status change.

    Args:
        current_status: Status in force
        new_status: Requested status
        actor: Identifier of the user making the change
        timestamp: Time of the change (defaults to now, UTC)

    Returns:
        StatusUpdate

    Raises:
        InvalidStatusTransition: If new_status is already in force
    """
    if new_status == current_status:
        raise InvalidStatusTransition(f"Recipe is already {current_status.value}")

    now = timestamp or utc_now()

    if new_status == RecipeStatus.APPROVED:
        return StatusUpdate(
            status=new_status, modified_by=actor, updated_at=now,
            approved_by=actor, approved_at=now,
        )
    if new_status == RecipeStatus.REVIEW:
        return StatusUpdate(
            status=new_status, modified_by=actor, updated_at=now,
            last_reviewed_by=actor, last_reviewed_at=now,
        )
    return StatusUpdate(status=new_status, modified_by=actor, updated_at=now)

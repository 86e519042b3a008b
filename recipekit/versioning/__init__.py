"""Version bump engine: turns classified changes into committed versions."""

from .version_bump import (
    bump_version,
    apply_version_bump,
    commit_version,
    check_transition,
    preview_next_versions,
    permitted_tiers,
    can_commit,
    change_status,
    VersionBumpResult,
    StatusUpdate,
)

__all__ = [
    "bump_version",
    "apply_version_bump",
    "commit_version",
    "check_transition",
    "preview_next_versions",
    "permitted_tiers",
    "can_commit",
    "change_status",
    "VersionBumpResult",
    "StatusUpdate",
]

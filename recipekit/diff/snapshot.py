"""
Recipe snapshot data model.

A snapshot is an immutable, fully-materialized view of a recipe document at
one point in time. Change classification only ever reads snapshots; it never
mutates them. Every container on a snapshot is a tuple, a frozenset or a
read-only mapping, so a snapshot cannot change underneath a classification
run.

This module also converts between snapshots and the record shape used by
the storage collaborator (snapshot_from_dict / Snapshot.to_dict), and
validates snapshots before classification.
"""

import re
from types import MappingProxyType
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..errors import MalformedSnapshot
from ..schema import FREE_TEXT_FIELDS, RecipeStatus, Tier
from .set_diff import normalize_identifier


# =============================================================================
# VERSION
# =============================================================================

@dataclass(frozen=True, order=True)
class Version:
    """
    Three-part version number, ordered as a (major, minor, patch) tuple.
    """
    major: int = 1
    minor: int = 0
    patch: int = 0

    def __post_init__(self):
        for part in (self.major, self.minor, self.patch):
            if not isinstance(part, int) or part < 0:
                raise ValueError(f"Version parts must be non-negative integers, got {self.as_tuple()}")

    @classmethod
    def parse(cls, text: Optional[str]) -> "Version":
        """
        Parse a version string leniently.

        "1.2" -> 1.2.0, "2" -> 2.0.0, "1.x.3" -> 1.0.3, "1.2.3.4" -> 1.2.3.
        Non-numeric parts read their leading digits, or 0 when there are none.
        An empty value is the initial version 1.0.0.
        """
        if text is None or not str(text).strip():
            return cls()

        parts = []
        for piece in str(text).strip().split(".")[:3]:
            match = re.match(r"\s*(\d+)", piece)
            parts.append(int(match.group(1)) if match else 0)
        while len(parts) < 3:
            parts.append(0)

        return cls(major=parts[0], minor=parts[1], patch=parts[2])

    def bump(self, tier: Tier) -> "Version":
        """Return the next version for a tier."""
        if tier == Tier.MAJOR:
            return Version(self.major + 1, 0, 0)
        if tier == Tier.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


# =============================================================================
# AUDIT HISTORY
# =============================================================================

def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        raise MalformedSnapshot("Audit entry is missing its timestamp", field="timestamp")
    text = str(value)
    # fromisoformat only accepts a trailing Z from Python 3.11 on
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedSnapshot(f"Invalid audit timestamp: {value!r}", field="timestamp") from e


@dataclass(frozen=True)
class AuditEntry:
    """
    One archived version in a recipe's audit history.

    The entry records the version that was true until the bump, who
    committed the bump, why, and at which tier.
    """
    version: Version
    timestamp: datetime
    author: str
    notes: str
    tier: Tier
    status: Optional[RecipeStatus] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted audit record format."""
        record = {
            "version": str(self.version),
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "notes": self.notes,
            "tier": self.tier.value,
        }
        if self.status is not None:
            record["status"] = self.status.value
        return record

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "AuditEntry":
        """Rebuild an entry from its persisted record."""
        try:
            tier = Tier(record["tier"])
            status = RecipeStatus(record["status"]) if record.get("status") else None
        except KeyError as e:
            raise MalformedSnapshot(f"Audit entry is missing {e.args[0]!r}", field=e.args[0]) from e
        except ValueError as e:
            raise MalformedSnapshot(f"Invalid audit entry: {e}") from e

        return cls(
            version=Version.parse(record.get("version")),
            timestamp=_parse_timestamp(record.get("timestamp")),
            author=record.get("author") or "",
            notes=record.get("notes") or "",
            tier=tier,
            status=status,
        )


# =============================================================================
# SAFETY ATTRIBUTES
# =============================================================================

@dataclass(frozen=True)
class SafetyAttributes:
    """
    The allergen declaration cached on a snapshot.

    - present: definite allergens (CONTAINS)
    - possible: supplier-risk allergens (MAY CONTAIN)
    - cross_contact: free-text environmental cross-contact notes

    An identifier listed in both present and possible is kept only in
    present.
    """
    present: FrozenSet[str] = frozenset()
    possible: FrozenSet[str] = frozenset()
    cross_contact: Tuple[str, ...] = ()

    def __post_init__(self):
        present = frozenset(self.present)
        present_keys = {normalize_identifier(p) for p in present}
        possible = frozenset(
            p for p in self.possible
            if normalize_identifier(p) not in present_keys
        )
        object.__setattr__(self, "present", present)
        object.__setattr__(self, "possible", possible)
        object.__setattr__(self, "cross_contact", tuple(self.cross_contact))


# =============================================================================
# COMPONENTS AND METHOD
# =============================================================================

class ComponentKind(Enum):
    """What a component entry points at."""
    DIRECT_REFERENCE = "direct-reference"                    # a catalog item
    NESTED_DOCUMENT_REFERENCE = "nested-document-reference"  # another recipe


# Record-shape ingredient types and their component kinds
INGREDIENT_TYPE_KINDS = {
    "raw": ComponentKind.DIRECT_REFERENCE,
    "prepared": ComponentKind.NESTED_DOCUMENT_REFERENCE,
}


@dataclass(frozen=True)
class Component:
    """
    One entry of a recipe's composition list.

    `id` is the stable identity of the entry and survives renames;
    `reference_id` is the catalog item or nested recipe it points at.
    """
    id: str
    kind: ComponentKind
    name: str = ""
    reference_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or "Unknown Ingredient"


@dataclass(frozen=True)
class Temperature:
    value: float
    unit: str = "F"

    def __str__(self) -> str:
        value = int(self.value) if float(self.value).is_integer() else self.value
        return f"{value}°{self.unit}"


@dataclass(frozen=True)
class MethodStep:
    instruction: str
    temperature: Optional[Temperature] = None
    duration_minutes: Optional[float] = None


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of a recipe document at one point in time.

    Supplied by the caller (the editing/storage layer) and read-only to
    change classification.
    """
    safety_attributes: SafetyAttributes = field(default_factory=SafetyAttributes)
    components: Tuple[Component, ...] = ()
    yield_amount: Optional[float] = None
    yield_unit: Optional[str] = None
    method_steps: Tuple[MethodStep, ...] = ()
    free_text: Mapping[str, str] = field(default_factory=dict)
    version: Version = field(default_factory=Version)
    status: RecipeStatus = RecipeStatus.DRAFT
    audit_history: Tuple[AuditEntry, ...] = ()
    document_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        # Containers are normalized to tuples; None is left in place so
        # validate_snapshot() can report the missing structure.
        for name in ("components", "method_steps", "audit_history"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        if self.free_text is not None:
            object.__setattr__(self, "free_text", MappingProxyType(dict(self.free_text)))

    @property
    def label(self) -> str:
        """Short identifier for log lines."""
        return self.name or self.document_id or "<unsaved recipe>"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the storage collaborator's record shape."""
        record: Dict[str, Any] = {
            "allergenInfo": {
                "contains": sorted(self.safety_attributes.present),
                "mayContain": sorted(self.safety_attributes.possible),
                "crossContactRisk": list(self.safety_attributes.cross_contact),
            },
            "ingredients": [_component_to_dict(c) for c in self.components],
            "yield_amount": self.yield_amount,
            "yield_unit": self.yield_unit,
            "steps": [_step_to_dict(s) for s in self.method_steps],
            "version": str(self.version),
            "status": self.status.value,
            "versions": [e.to_dict() for e in self.audit_history],
        }
        for name in FREE_TEXT_FIELDS:
            record[name] = self.free_text.get(name, "")
        if self.document_id is not None:
            record["id"] = self.document_id
        if self.name is not None:
            record["name"] = self.name
        return record


def _component_to_dict(component: Component) -> Dict[str, Any]:
    record = {
        "id": component.id,
        "ingredient_name": component.name,
    }
    if component.kind == ComponentKind.DIRECT_REFERENCE:
        record["ingredient_type"] = "raw"
        record["master_ingredient_id"] = component.reference_id
    else:
        record["ingredient_type"] = "prepared"
        record["prepared_recipe_id"] = component.reference_id
    return record


def _step_to_dict(step: MethodStep) -> Dict[str, Any]:
    record: Dict[str, Any] = {"instruction": step.instruction}
    if step.temperature is not None:
        record["temperature"] = {"value": step.temperature.value, "unit": step.temperature.unit}
    if step.duration_minutes is not None:
        record["time_in_minutes"] = step.duration_minutes
    return record


# =============================================================================
# PARSING
# =============================================================================

def _component_from_dict(record: Mapping[str, Any], index: int) -> Component:
    if not isinstance(record, Mapping):
        raise MalformedSnapshot(f"Ingredient #{index + 1} is not a record", field="ingredients")

    component_id = record.get("id")
    if component_id is None or str(component_id).strip() == "":
        raise MalformedSnapshot(f"Ingredient #{index + 1} has no id", field="ingredients")

    ingredient_type = record.get("ingredient_type") or record.get("type") or "raw"
    if ingredient_type in INGREDIENT_TYPE_KINDS:
        kind = INGREDIENT_TYPE_KINDS[ingredient_type]
    else:
        try:
            kind = ComponentKind(ingredient_type)
        except ValueError as e:
            raise MalformedSnapshot(
                f"Ingredient {component_id} has unknown type {ingredient_type!r}",
                field="ingredients"
            ) from e

    if kind == ComponentKind.DIRECT_REFERENCE:
        reference_id = record.get("master_ingredient_id")
    else:
        reference_id = record.get("prepared_recipe_id")

    name = (
        record.get("ingredient_name")
        or record.get("common_name")
        or record.get("name")
        or ""
    )

    return Component(
        id=str(component_id),
        kind=kind,
        name=name,
        reference_id=str(reference_id) if reference_id else None,
    )


def _step_from_dict(record: Mapping[str, Any], index: int) -> MethodStep:
    if not isinstance(record, Mapping):
        raise MalformedSnapshot(f"Step #{index + 1} is not a record", field="steps")

    temperature = None
    raw_temperature = record.get("temperature")
    if raw_temperature:
        if not isinstance(raw_temperature, Mapping) or raw_temperature.get("value") is None:
            raise MalformedSnapshot(f"Step #{index + 1} has an invalid temperature", field="steps")
        temperature = Temperature(
            value=float(raw_temperature["value"]),
            unit=str(raw_temperature.get("unit") or "F").upper(),
        )

    duration = record.get("time_in_minutes")

    return MethodStep(
        instruction=record.get("instruction") or "",
        temperature=temperature,
        duration_minutes=float(duration) if duration is not None else None,
    )


def _string_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise MalformedSnapshot(f"{field_name} must be a list of strings", field=field_name)
    return [str(v) for v in value]


def snapshot_from_dict(data: Mapping[str, Any]) -> Snapshot:
    """
    Build a Snapshot from a stored recipe record.

    Expected shape (as persisted by the storage collaborator):
        {
            "id": "...", "name": "...",
            "allergenInfo": {"contains": [...], "mayContain": [...], "crossContactRisk": [...]},
            "ingredients": [{"id", "ingredient_type": "raw"|"prepared",
                             "master_ingredient_id" | "prepared_recipe_id", "ingredient_name"}],
            "yield_amount": 4, "yield_unit": "kg",
            "steps": [{"instruction", "temperature": {"value", "unit"}, "time_in_minutes"}],
            "description": "...", "production_notes": "...",
            "version": "1.2.3", "status": "approved",
            "versions": [{"version", "timestamp", "author", "notes", "tier"}]
        }

    Args:
        data: Stored recipe record

    Returns:
        Snapshot

    Raises:
        MalformedSnapshot: If a required structure is missing or invalid
    """
    if not isinstance(data, Mapping):
        raise MalformedSnapshot("Snapshot record must be a mapping")

    ingredients = data.get("ingredients")
    if ingredients is None:
        raise MalformedSnapshot("Snapshot has no ingredient list", field="ingredients")
    if isinstance(ingredients, (str, Mapping)) or not isinstance(ingredients, Iterable):
        raise MalformedSnapshot("Ingredient list must be a list", field="ingredients")

    steps = data.get("steps")
    if steps is None:
        steps = []
    elif isinstance(steps, (str, Mapping)) or not isinstance(steps, Iterable):
        raise MalformedSnapshot("Step list must be a list", field="steps")

    # The legacy "allergens" key carries the same declaration shape
    allergen_info = data.get("allergenInfo") or data.get("allergens") or {}
    if not isinstance(allergen_info, Mapping):
        raise MalformedSnapshot("allergenInfo must be a mapping", field="allergenInfo")

    safety = SafetyAttributes(
        present=frozenset(_string_list(allergen_info.get("contains"), "contains")),
        possible=frozenset(_string_list(allergen_info.get("mayContain"), "mayContain")),
        cross_contact=tuple(_string_list(allergen_info.get("crossContactRisk"), "crossContactRisk")),
    )

    try:
        status = RecipeStatus(data.get("status") or RecipeStatus.DRAFT.value)
    except ValueError as e:
        raise MalformedSnapshot(f"Unknown status {data.get('status')!r}", field="status") from e

    yield_amount = data.get("yield_amount")
    if yield_amount is not None:
        try:
            yield_amount = float(yield_amount)
        except (TypeError, ValueError) as e:
            raise MalformedSnapshot(f"Invalid yield amount {yield_amount!r}", field="yield_amount") from e

    history = data.get("versions") or []

    return Snapshot(
        safety_attributes=safety,
        components=tuple(_component_from_dict(c, i) for i, c in enumerate(ingredients)),
        yield_amount=yield_amount,
        yield_unit=data.get("yield_unit"),
        method_steps=tuple(_step_from_dict(s, i) for i, s in enumerate(steps)),
        free_text={name: data.get(name) or "" for name in FREE_TEXT_FIELDS},
        version=Version.parse(data.get("version")),
        status=status,
        audit_history=tuple(AuditEntry.from_dict(e) for e in history),
        document_id=str(data["id"]) if data.get("id") is not None else None,
        name=data.get("name"),
    )


def validate_snapshot(snapshot: Snapshot, role: str = "snapshot") -> None:
    """
    Check that a snapshot carries every structure classification reads.

    Args:
        snapshot: Snapshot to check
        role: "previous" or "current", used in the error message

    Raises:
        MalformedSnapshot: If a structure is absent or of the wrong type
    """
    if not isinstance(snapshot, Snapshot):
        raise MalformedSnapshot(f"The {role} snapshot is not a Snapshot")

    if snapshot.components is None:
        raise MalformedSnapshot(f"The {role} snapshot has no component list", field="components")
    if snapshot.method_steps is None:
        raise MalformedSnapshot(f"The {role} snapshot has no method step list", field="method_steps")
    if snapshot.safety_attributes is None:
        raise MalformedSnapshot(f"The {role} snapshot has no safety attributes", field="safety_attributes")
    if snapshot.free_text is None:
        raise MalformedSnapshot(f"The {role} snapshot has no free-text fields", field="free_text")

    for component in snapshot.components:
        if not isinstance(component, Component) or not component.id:
            raise MalformedSnapshot(
                f"The {role} snapshot has a component without a stable id",
                field="components"
            )
        if not isinstance(component.kind, ComponentKind):
            raise MalformedSnapshot(
                f"Component {component.id} in the {role} snapshot has no valid kind",
                field="components"
            )

    for step in snapshot.method_steps:
        if not isinstance(step, MethodStep):
            raise MalformedSnapshot(f"The {role} snapshot has an invalid method step", field="method_steps")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

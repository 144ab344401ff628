from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Mapping, Type, TypeVar

from installations_api.errors import InvalidTransition, PersistenceFailure


class InstallationStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


class PermitStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class MilestoneType(str, Enum):
    SITE_SURVEY = "site_survey"
    DESIGN = "design"
    PERMITTING = "permitting"
    EQUIPMENT_DELIVERY = "equipment_delivery"
    MOUNTING = "mounting"
    ELECTRICAL = "electrical"
    INSPECTION = "inspection"
    INTERCONNECTION = "interconnection"


class PermitType(str, Enum):
    BUILDING = "building"
    ELECTRICAL = "electrical"
    UTILITY_INTERCONNECTION = "utility_interconnection"


INSTALLATION_TRANSITIONS: Dict[InstallationStatus, FrozenSet[InstallationStatus]] = {
    InstallationStatus.SCHEDULED: frozenset({InstallationStatus.IN_PROGRESS, InstallationStatus.CANCELLED}),
    InstallationStatus.IN_PROGRESS: frozenset({InstallationStatus.COMPLETED, InstallationStatus.CANCELLED}),
    InstallationStatus.COMPLETED: frozenset(),
    InstallationStatus.CANCELLED: frozenset(),
}

# Milestone order is not enforced across milestones; any milestone may move
# independently of its siblings.
MILESTONE_TRANSITIONS: Dict[MilestoneStatus, FrozenSet[MilestoneStatus]] = {
    MilestoneStatus.PENDING: frozenset({MilestoneStatus.IN_PROGRESS, MilestoneStatus.DELAYED}),
    MilestoneStatus.IN_PROGRESS: frozenset({MilestoneStatus.COMPLETED, MilestoneStatus.DELAYED}),
    MilestoneStatus.DELAYED: frozenset({MilestoneStatus.IN_PROGRESS}),
    MilestoneStatus.COMPLETED: frozenset(),
}

PERMIT_TRANSITIONS: Dict[PermitStatus, FrozenSet[PermitStatus]] = {
    PermitStatus.NOT_SUBMITTED: frozenset({PermitStatus.SUBMITTED}),
    PermitStatus.SUBMITTED: frozenset({PermitStatus.APPROVED, PermitStatus.REJECTED}),
    PermitStatus.APPROVED: frozenset(),
    PermitStatus.REJECTED: frozenset(),
}

S = TypeVar("S", bound=Enum)


def parse_status(enum_cls: Type[S], value: object, *, entity: str, current: str | None = None) -> S:
    raw = value.value if isinstance(value, Enum) else str(value or "").strip().lower()
    try:
        return enum_cls(raw)
    except ValueError:
        raise InvalidTransition(entity, current, raw) from None


def is_allowed(table: Mapping[S, FrozenSet[S]], current: S, requested: S) -> bool:
    return requested in table.get(current, frozenset())


def check_transition(table: Mapping[S, FrozenSet[S]], current: S, requested: S, *, entity: str) -> None:
    if not is_allowed(table, current, requested):
        raise InvalidTransition(entity, current.value, requested.value)


def stored_status(enum_cls: Type[S], value: object, *, entity: str, entity_id: str) -> S:
    """Parse the status persisted on a row; unknown values are a persistence fault."""
    try:
        return enum_cls(str(value or "").strip().lower())
    except ValueError:
        raise PersistenceFailure(f"{entity} {entity_id} has unrecognized stored status {value!r}") from None

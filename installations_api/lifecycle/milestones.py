from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from installations_api.lifecycle.statuses import (
    MILESTONE_TRANSITIONS,
    MilestoneStatus,
    check_transition,
    parse_status,
    stored_status,
)
from installations_api.models import Milestone


def current_status(milestone: Milestone) -> MilestoneStatus:
    return stored_status(MilestoneStatus, milestone.status, entity="milestone", entity_id=milestone.id)


def validate_transition(milestone: Milestone, requested: object) -> MilestoneStatus:
    current = current_status(milestone)
    target = parse_status(MilestoneStatus, requested, entity="milestone", current=current.value)
    check_transition(MILESTONE_TRANSITIONS, current, target, entity="milestone")
    return target


def set_status(milestone: Milestone, new_status: MilestoneStatus, today: date) -> Milestone:
    milestone.status = new_status.value
    milestone.completed_date = today if new_status == MilestoneStatus.COMPLETED else None
    return milestone


def progress(milestones: Sequence[Milestone]) -> int:
    """Percentage of milestones completed, 0 when there are none.

    Every milestone counts equally. Halves round up, so 1 of 8 is 13.
    """
    total = len(milestones)
    if total == 0:
        return 0
    completed = sum(1 for item in milestones if item.status == MilestoneStatus.COMPLETED.value)
    ratio = Decimal(100 * completed) / Decimal(total)
    return max(0, min(100, int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))))


def next_step(milestones: Sequence[Milestone], after: Milestone) -> Optional[str]:
    seen = False
    for item in milestones:
        if item.id == after.id:
            seen = True
            continue
        if seen and item.status != MilestoneStatus.COMPLETED.value:
            return item.milestone_name
    return None

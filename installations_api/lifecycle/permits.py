from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List

from installations_api.lifecycle.statuses import (
    PERMIT_TRANSITIONS,
    PermitStatus,
    check_transition,
    parse_status,
    stored_status,
)
from installations_api.models import Permit


def current_status(permit: Permit) -> PermitStatus:
    return stored_status(PermitStatus, permit.status, entity="permit", entity_id=permit.id)


def validate_transition(permit: Permit, requested: object) -> PermitStatus:
    current = current_status(permit)
    target = parse_status(PermitStatus, requested, entity="permit", current=current.value)
    check_transition(PERMIT_TRANSITIONS, current, target, entity="permit")
    return target


def set_status(permit: Permit, new_status: PermitStatus, today: date) -> Permit:
    permit.status = new_status.value
    if new_status == PermitStatus.SUBMITTED and permit.application_date is None:
        permit.application_date = today
    if new_status == PermitStatus.APPROVED:
        permit.approval_date = today
    return permit


def expiring(permits: Iterable[Permit], *, within_days: int, today: date) -> List[Permit]:
    """Approved permits whose expiration date falls within the next ``within_days`` days."""
    horizon = today + timedelta(days=max(0, within_days))
    return [
        permit
        for permit in permits
        if permit.status == PermitStatus.APPROVED.value
        and permit.expiration_date is not None
        and today <= permit.expiration_date <= horizon
    ]

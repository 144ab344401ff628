from datetime import date, timedelta

import pytest

from installations_api.errors import InvalidTransition
from installations_api.lifecycle import permits as tracker
from installations_api.lifecycle.statuses import PermitStatus
from installations_api.models import Permit

TODAY = date(2026, 3, 14)


def _permit(status="not_submitted", **kwargs):
    return Permit(id=kwargs.pop("id", "p1"), permit_type="building", status=status, **kwargs)


def test_submitting_stamps_application_date_when_missing():
    permit = _permit()
    tracker.set_status(permit, PermitStatus.SUBMITTED, TODAY)
    assert permit.status == "submitted"
    assert permit.application_date == TODAY
    assert permit.approval_date is None


def test_submitting_keeps_an_existing_application_date():
    applied = date(2026, 2, 1)
    permit = _permit(application_date=applied)
    tracker.set_status(permit, PermitStatus.SUBMITTED, TODAY)
    assert permit.application_date == applied


def test_approval_stamps_approval_date():
    permit = _permit("submitted")
    tracker.set_status(permit, tracker.validate_transition(permit, "approved"), TODAY)
    assert permit.status == "approved"
    assert permit.approval_date == TODAY


def test_rejection_leaves_approval_date_empty():
    permit = _permit("submitted")
    tracker.set_status(permit, tracker.validate_transition(permit, "rejected"), TODAY)
    assert permit.approval_date is None


@pytest.mark.parametrize(
    "current,requested",
    [
        ("not_submitted", "approved"),
        ("not_submitted", "rejected"),
        ("approved", "submitted"),
        ("approved", "rejected"),
        ("rejected", "approved"),
        ("submitted", "submitted"),
    ],
)
def test_invalid_permit_transitions_are_rejected(current, requested):
    with pytest.raises(InvalidTransition):
        tracker.validate_transition(_permit(current), requested)


def test_expiring_only_returns_approved_permits_inside_window():
    soon = _permit("approved", id="soon", expiration_date=TODAY + timedelta(days=10))
    later = _permit("approved", id="later", expiration_date=TODAY + timedelta(days=90))
    lapsed = _permit("approved", id="lapsed", expiration_date=TODAY - timedelta(days=1))
    pending = _permit("submitted", id="pending", expiration_date=TODAY + timedelta(days=5))
    result = tracker.expiring([soon, later, lapsed, pending], within_days=30, today=TODAY)
    assert [permit.id for permit in result] == ["soon"]

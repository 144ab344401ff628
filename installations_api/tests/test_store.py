from datetime import date

import pytest

from installations_api.errors import NotFound
from installations_api.lifecycle.statuses import InstallationStatus, MilestoneType
from installations_api.models import Customer
from installations_api.store import InstallationStore, format_installation_number
from installations_api.tests.conftest import TENANT


def test_installation_numbers_are_sequential_per_tenant(store, customer, installation, db):
    second = store.create_installation(
        customer_id=customer.id,
        installation_address="14 Sunny Lane",
        scheduled_date=date(2026, 4, 9),
    )
    assert installation.installation_number == "INS-000001"
    assert second.installation_number == "INS-000002"
    assert second.status == "scheduled"
    assert second.completed_date is None

    other_customer = Customer(tenant_id="tenant-b", first_name="Lee", last_name="Ortiz", email="lee@example.com")
    db.add(other_customer)
    db.commit()
    other_store = InstallationStore(db, "tenant-b")
    other = other_store.create_installation(
        customer_id=other_customer.id,
        installation_address="1 Elm St",
        scheduled_date=date(2026, 5, 1),
    )
    assert other.installation_number == "INS-000001"


def test_format_installation_number_pads_to_six_digits():
    assert format_installation_number(123) == "INS-000123"


def test_create_installation_requires_customer_in_same_tenant(db, customer):
    with pytest.raises(NotFound):
        InstallationStore(db, "tenant-b").create_installation(
            customer_id=customer.id,
            installation_address="1 Elm St",
            scheduled_date=date(2026, 5, 1),
        )


def test_rows_from_other_tenants_are_not_found(db, installation, site_survey, building_permit):
    other = InstallationStore(db, "tenant-b")
    with pytest.raises(NotFound):
        other.get_installation(installation.id)
    with pytest.raises(NotFound):
        other.get_milestone(site_survey.id)
    with pytest.raises(NotFound):
        other.get_permit(building_permit.id)
    with pytest.raises(NotFound):
        other.list_milestones(installation.id)


def test_milestones_keep_creation_order(store, installation):
    names = ["Site survey", "Permitting", "Mounting", "Inspection"]
    types = [MilestoneType.SITE_SURVEY, MilestoneType.PERMITTING, MilestoneType.MOUNTING, MilestoneType.INSPECTION]
    for name, mtype in zip(names, types):
        store.add_milestone(installation.id, milestone_type=mtype, milestone_name=name)
    listed = store.list_milestones(installation.id)
    assert [item.milestone_name for item in listed] == names
    assert [item.position for item in listed] == [0, 1, 2, 3]
    assert all(item.status == "pending" for item in listed)


def test_completed_date_is_stamped_once_and_never_cleared(store, installation):
    store.set_installation_status(installation, InstallationStatus.COMPLETED, date(2026, 4, 20))
    store.commit()
    assert installation.completed_date == date(2026, 4, 20)

    store.set_installation_status(installation, InstallationStatus.COMPLETED, date(2026, 4, 25))
    assert installation.completed_date == date(2026, 4, 20)

    store.set_installation_status(installation, InstallationStatus.CANCELLED, date(2026, 4, 26))
    store.commit()
    assert installation.status == "cancelled"
    assert installation.completed_date == date(2026, 4, 20)


def test_non_completed_status_leaves_completed_date_unset(store, installation):
    store.set_installation_status(installation, InstallationStatus.IN_PROGRESS, date(2026, 4, 2))
    store.commit()
    assert installation.completed_date is None


def test_store_requires_tenant(db):
    with pytest.raises(ValueError):
        InstallationStore(db, "")


def test_permits_belong_to_their_installation(store, installation, building_permit):
    permits = store.list_permits(installation.id)
    assert [permit.id for permit in permits] == [building_permit.id]
    assert permits[0].status == "not_submitted"
    assert permits[0].approval_date is None
    assert TENANT == permits[0].tenant_id


def test_list_installations_filters_and_orders(store, db, customer, installation):
    earlier = store.create_installation(
        customer_id=customer.id,
        installation_address="300 Oak Hollow Dr, Cedar Park, TX",
        scheduled_date=date(2026, 3, 20),
    )
    store.set_installation_status(earlier, InstallationStatus.IN_PROGRESS, date(2026, 3, 20))
    store.commit()

    assert [item.id for item in store.list_installations()] == [earlier.id, installation.id]
    assert [item.id for item in store.list_installations(status=InstallationStatus.SCHEDULED)] == [installation.id]
    assert [item.id for item in store.list_installations(search="oak hollow")] == [earlier.id]
    assert [item.id for item in store.list_installations(search="ins-000001")] == [installation.id]
    assert InstallationStore(db, "tenant-b").list_installations() == []


def test_count_by_status_includes_every_status(store, installation):
    assert store.count_by_status() == {"scheduled": 1, "in_progress": 0, "completed": 0, "cancelled": 0}

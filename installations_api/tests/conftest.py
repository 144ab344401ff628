import os
import time
from datetime import date
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INSTALLATIONS_JWT_SECRET"] = "test-secret"
os.environ["INSTALLATIONS_OIDC_ENABLED"] = "false"

import jwt
import pytest

from installations_api.db import SessionLocal, engine
from installations_api.errors import DispatchFailure
from installations_api.lifecycle.controller import LifecycleController
from installations_api.lifecycle.statuses import MilestoneType, PermitType
from installations_api.models import Base, Customer
from installations_api.notifications.registry import NotificationDispatcher
from installations_api.store import InstallationStore

TODAY = date(2026, 3, 14)
TENANT = "tenant-a"


class RecordingNotifier:
    notifier_type = "recording"

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message, recipient):
        if self.fail:
            raise DispatchFailure("mail provider unavailable")
        self.sent.append((recipient, message))
        return f"msg-{len(self.sent)}"


class RecordingDispatcher(NotificationDispatcher):
    def __init__(self, notifier):
        super().__init__(notifier)
        self.events = []

    def send(self, event):
        self.events.append(event)
        return super().send(event)


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return InstallationStore(db, TENANT)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    return RecordingDispatcher(notifier)


@pytest.fixture
def controller(store, dispatcher):
    return LifecycleController(store, dispatcher, today=lambda: TODAY)


@pytest.fixture
def customer(db):
    row = Customer(tenant_id=TENANT, first_name="Dana", last_name="Whitfield", email="dana@example.com")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def installation(store, customer):
    return store.create_installation(
        customer_id=customer.id,
        installation_address="12 Sunny Lane, Austin, TX",
        scheduled_date=date(2026, 4, 2),
        system_size=Decimal("8.40"),
        total_value=Decimal("21500.00"),
    )


@pytest.fixture
def site_survey(store, installation):
    return store.add_milestone(installation.id, milestone_type=MilestoneType.SITE_SURVEY, milestone_name="Site survey")


@pytest.fixture
def building_permit(store, installation):
    return store.add_permit(
        installation.id,
        permit_type=PermitType.BUILDING,
        issuing_authority="City of Austin Development Services",
    )


def make_token(roles=("admin",), tenant_id=TENANT, **extra):
    now = int(time.time())
    payload = {
        "iss": "solarbiz-installations",
        "aud": "installations",
        "iat": now,
        "exp": now + 600,
        "sub": "user-1",
        "roles": list(roles),
        **extra,
    }
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    return jwt.encode(payload, os.environ["INSTALLATIONS_JWT_SECRET"], algorithm="HS256")


def auth_headers(**kwargs):
    return {"Authorization": f"Bearer {make_token(**kwargs)}"}

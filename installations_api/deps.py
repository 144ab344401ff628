from fastapi import Depends
from sqlalchemy.orm import Session

from installations_api.auth import require_tenant
from installations_api.db import get_db
from installations_api.lifecycle.controller import LifecycleController
from installations_api.notifications.registry import NotificationDispatcher, get_dispatcher
from installations_api.store import InstallationStore


def get_store(tenant_id: str = Depends(require_tenant), db: Session = Depends(get_db)) -> InstallationStore:
    return InstallationStore(db, tenant_id)


def get_controller(
    store: InstallationStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> LifecycleController:
    return LifecycleController(store, dispatcher)

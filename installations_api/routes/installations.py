from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from installations_api.auth import require_user
from installations_api.deps import get_controller, get_store
from installations_api.lifecycle import permits as permit_tracker
from installations_api.lifecycle.controller import LifecycleController
from installations_api.lifecycle.statuses import InstallationStatus, MilestoneType, PermitType
from installations_api.rbac import WRITE_ROLES, require_roles
from installations_api.serializers import (
    serialize_installation,
    serialize_milestone,
    serialize_permit,
    serialize_transition,
)
from installations_api.store import InstallationStore

router = APIRouter(prefix="/installations", tags=["installations"])


class InstallationIn(BaseModel):
    customer_id: str
    installation_address: str = Field(min_length=1, max_length=500)
    scheduled_date: date
    system_size: Optional[Decimal] = Field(default=None, ge=0)
    total_value: Optional[Decimal] = Field(default=None, ge=0)
    installer_notes: Optional[str] = None
    customer_notes: Optional[str] = None


class StatusChangeIn(BaseModel):
    status: str


class ManualUpdateIn(BaseModel):
    status: Optional[InstallationStatus] = None
    milestone: Optional[str] = None


class MilestoneIn(BaseModel):
    milestone_type: MilestoneType
    milestone_name: str = Field(min_length=1, max_length=200)
    scheduled_date: Optional[date] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None


class PermitIn(BaseModel):
    permit_type: PermitType
    permit_number: Optional[str] = None
    issuing_authority: Optional[str] = None
    application_date: Optional[date] = None
    expiration_date: Optional[date] = None
    notes: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
def create_installation(
    payload: InstallationIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    store: InstallationStore = Depends(get_store),
):
    installation = store.create_installation(**payload.model_dump())
    return serialize_installation(installation)


@router.get("")
def list_installations(
    status_filter: Optional[InstallationStatus] = Query(default=None, alias="status"),
    q: Optional[str] = Query(default=None, max_length=200),
    user=Depends(require_user),
    store: InstallationStore = Depends(get_store),
):
    return [serialize_installation(item) for item in store.list_installations(status=status_filter, search=q)]


@router.get("/summary")
def installation_summary(user=Depends(require_user), store: InstallationStore = Depends(get_store)):
    counts = store.count_by_status()
    return {"total": sum(counts.values()), "by_status": counts}


@router.get("/{installation_id}")
def get_installation(installation_id: str, user=Depends(require_user), store: InstallationStore = Depends(get_store)):
    return serialize_installation(store.get_installation(installation_id))


@router.post("/{installation_id}/transition")
def transition_installation(
    installation_id: str,
    payload: StatusChangeIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    controller: LifecycleController = Depends(get_controller),
):
    result = controller.transition_installation(installation_id, payload.status)
    return serialize_transition("installation", result, serialize_installation)


@router.get("/{installation_id}/progress")
def get_progress(
    installation_id: str,
    user=Depends(require_user),
    controller: LifecycleController = Depends(get_controller),
):
    return {"installation_id": installation_id, "progress": controller.get_progress(installation_id)}


@router.post("/{installation_id}/send-update")
def send_manual_update(
    installation_id: str,
    payload: ManualUpdateIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    controller: LifecycleController = Depends(get_controller),
):
    result = controller.send_manual_update(installation_id, payload.status, payload.milestone)
    return {"notification": result.as_dict()}


@router.get("/{installation_id}/milestones")
def list_milestones(installation_id: str, user=Depends(require_user), store: InstallationStore = Depends(get_store)):
    return [serialize_milestone(item) for item in store.list_milestones(installation_id)]


@router.post("/{installation_id}/milestones", status_code=status.HTTP_201_CREATED)
def add_milestone(
    installation_id: str,
    payload: MilestoneIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    store: InstallationStore = Depends(get_store),
):
    return serialize_milestone(store.add_milestone(installation_id, **payload.model_dump()))


@router.get("/{installation_id}/permits")
def list_permits(installation_id: str, user=Depends(require_user), store: InstallationStore = Depends(get_store)):
    return [serialize_permit(item) for item in store.list_permits(installation_id)]


@router.get("/{installation_id}/permits/expiring")
def list_expiring_permits(
    installation_id: str,
    within_days: int = Query(default=30, ge=0, le=3650),
    user=Depends(require_user),
    store: InstallationStore = Depends(get_store),
):
    permits = permit_tracker.expiring(store.list_permits(installation_id), within_days=within_days, today=date.today())
    return [serialize_permit(item) for item in permits]


@router.post("/{installation_id}/permits", status_code=status.HTTP_201_CREATED)
def add_permit(
    installation_id: str,
    payload: PermitIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    store: InstallationStore = Depends(get_store),
):
    return serialize_permit(store.add_permit(installation_id, **payload.model_dump()))

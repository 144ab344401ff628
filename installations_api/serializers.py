from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from installations_api.lifecycle.controller import TransitionResult
from installations_api.models import Installation, Milestone, Permit


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_installation(installation: Installation) -> Dict[str, Any]:
    return {
        "id": installation.id,
        "installation_number": installation.installation_number,
        "customer_id": installation.customer_id,
        "installation_address": installation.installation_address,
        "status": installation.status,
        "scheduled_date": _iso(installation.scheduled_date),
        "completed_date": _iso(installation.completed_date),
        "system_size": _number(installation.system_size),
        "total_value": _number(installation.total_value),
        "installer_notes": installation.installer_notes,
        "customer_notes": installation.customer_notes,
    }


def serialize_milestone(milestone: Milestone) -> Dict[str, Any]:
    return {
        "id": milestone.id,
        "installation_id": milestone.installation_id,
        "position": milestone.position,
        "milestone_type": milestone.milestone_type,
        "milestone_name": milestone.milestone_name,
        "status": milestone.status,
        "scheduled_date": _iso(milestone.scheduled_date),
        "completed_date": _iso(milestone.completed_date),
        "assigned_to": milestone.assigned_to,
        "notes": milestone.notes,
    }


def serialize_permit(permit: Permit) -> Dict[str, Any]:
    return {
        "id": permit.id,
        "installation_id": permit.installation_id,
        "permit_type": permit.permit_type,
        "permit_number": permit.permit_number,
        "issuing_authority": permit.issuing_authority,
        "status": permit.status,
        "application_date": _iso(permit.application_date),
        "approval_date": _iso(permit.approval_date),
        "expiration_date": _iso(permit.expiration_date),
        "notes": permit.notes,
    }


def serialize_transition(key: str, result: TransitionResult, serializer) -> Dict[str, Any]:
    return {
        key: serializer(result.entity),
        "notification": result.notification.as_dict() if result.notification is not None else None,
    }

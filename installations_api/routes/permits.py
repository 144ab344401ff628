from fastapi import APIRouter, Depends

from installations_api.deps import get_controller
from installations_api.lifecycle.controller import LifecycleController
from installations_api.rbac import WRITE_ROLES, require_roles
from installations_api.routes.installations import StatusChangeIn
from installations_api.serializers import serialize_permit, serialize_transition

router = APIRouter(prefix="/permits", tags=["permits"])


@router.post("/{permit_id}/transition")
def transition_permit(
    permit_id: str,
    payload: StatusChangeIn,
    user=Depends(require_roles(*WRITE_ROLES)),
    controller: LifecycleController = Depends(get_controller),
):
    result = controller.transition_permit(permit_id, payload.status)
    return serialize_transition("permit", result, serialize_permit)

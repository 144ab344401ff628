from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List, Optional

from installations_api.customers import CustomerDirectory
from installations_api.errors import LifecycleError
from installations_api.lifecycle import milestones as milestone_tracker
from installations_api.lifecycle import permits as permit_tracker
from installations_api.lifecycle.statuses import (
    INSTALLATION_TRANSITIONS,
    InstallationStatus,
    MilestoneStatus,
    check_transition,
    parse_status,
    stored_status,
)
from installations_api.models import Installation, Milestone, Permit
from installations_api.notifications.events import DispatchResult, NotificationEvent
from installations_api.notifications.registry import NotificationDispatcher
from installations_api.store import InstallationStore

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    entity: Any
    # None when the transition is not customer-visible.
    notification: Optional[DispatchResult] = None


class LifecycleController:
    """Single entry point for installation, milestone and permit status changes.

    Each transition is validated against the owning transition table before
    anything is written, committed on its own, and only then (for
    customer-visible transitions) announced to the customer. The dispatch
    outcome is returned next to the entity and never undoes the commit.
    """

    def __init__(
        self,
        store: InstallationStore,
        dispatcher: NotificationDispatcher,
        *,
        directory: Optional[CustomerDirectory] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.directory = directory or CustomerDirectory(store)
        self.today = today or date.today

    def transition_installation(self, installation_id: str, new_status: Any) -> TransitionResult:
        try:
            installation = self.store.get_installation(installation_id, lock=True)
            current = stored_status(
                InstallationStatus, installation.status, entity="installation", entity_id=installation.id
            )
            target = parse_status(InstallationStatus, new_status, entity="installation", current=current.value)
            check_transition(INSTALLATION_TRANSITIONS, current, target, entity="installation")
            hint = _first_open(self.store.list_milestones(installation.id))
        except LifecycleError:
            self.store.rollback()
            raise
        self.store.set_installation_status(installation, target, self.today())
        self.store.commit()
        logger.info(
            "Installation %s moved %s -> %s",
            installation.installation_number,
            current.value,
            target.value,
            extra={"tenant_id": self.store.tenant_id, "installation_id": installation.id},
        )
        notification = self._dispatch(installation, next_step=hint)
        return TransitionResult(installation, notification)

    def transition_milestone(self, milestone_id: str, new_status: Any) -> TransitionResult:
        try:
            milestone = self.store.get_milestone(milestone_id, lock=True)
            previous = milestone.status
            target = milestone_tracker.validate_transition(milestone, new_status)
            installation = self.store.get_installation(milestone.installation_id)
            siblings = self.store.list_milestones(installation.id)
        except LifecycleError:
            self.store.rollback()
            raise
        milestone_tracker.set_status(milestone, target, self.today())
        self.store.commit()
        logger.info(
            "Milestone %r moved %s -> %s",
            milestone.milestone_name,
            previous,
            target.value,
            extra={"tenant_id": self.store.tenant_id, "milestone_id": milestone.id},
        )
        if target != MilestoneStatus.COMPLETED:
            return TransitionResult(milestone)
        notification = self._dispatch(
            installation,
            milestone=milestone.milestone_name,
            next_step=milestone_tracker.next_step(siblings, milestone),
        )
        return TransitionResult(milestone, notification)

    def transition_permit(self, permit_id: str, new_status: Any) -> TransitionResult:
        try:
            permit = self.store.get_permit(permit_id, lock=True)
            previous = permit.status
            target = permit_tracker.validate_transition(permit, new_status)
        except LifecycleError:
            self.store.rollback()
            raise
        permit_tracker.set_status(permit, target, self.today())
        self.store.commit()
        logger.info(
            "Permit %s moved %s -> %s",
            permit.permit_type,
            previous,
            target.value,
            extra={"tenant_id": self.store.tenant_id, "permit_id": permit.id},
        )
        return TransitionResult(permit)

    def send_manual_update(
        self,
        installation_id: str,
        override_status: Any = None,
        milestone_name: Optional[str] = None,
    ) -> DispatchResult:
        installation = self.store.get_installation(installation_id)
        status = None
        if override_status is not None:
            status = parse_status(InstallationStatus, override_status, entity="installation").value
        milestones = self.store.list_milestones(installation.id)
        named = next((item for item in milestones if item.milestone_name == milestone_name), None)
        if named is not None:
            hint = milestone_tracker.next_step(milestones, named)
        else:
            hint = _first_open(milestones)
        return self._dispatch(installation, status=status, milestone=milestone_name or None, next_step=hint)

    def get_progress(self, installation_id: str) -> int:
        return milestone_tracker.progress(self.store.list_milestones(installation_id))

    def list_milestones(self, installation_id: str) -> List[Milestone]:
        return self.store.list_milestones(installation_id)

    def list_permits(self, installation_id: str) -> List[Permit]:
        return self.store.list_permits(installation_id)

    def _dispatch(
        self,
        installation: Installation,
        *,
        status: Optional[str] = None,
        milestone: Optional[str] = None,
        next_step: Optional[str] = None,
    ) -> DispatchResult:
        try:
            contact = self.directory.get_customer_contact(installation.customer_id)
        except LifecycleError as exc:
            logger.warning(
                "No customer contact for installation %s: %s",
                installation.installation_number,
                exc,
            )
            return DispatchResult.failure(str(exc))
        event = NotificationEvent.for_installation(
            installation,
            contact,
            status=status,
            milestone=milestone,
            next_step=next_step,
        )
        return self.dispatcher.send(event)


def _first_open(milestones: List[Milestone]) -> Optional[str]:
    for item in milestones:
        if item.status != MilestoneStatus.COMPLETED.value:
            return item.milestone_name
    return None

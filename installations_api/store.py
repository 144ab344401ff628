from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Type, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from installations_api.errors import ConcurrentModification, NotFound, PersistenceFailure
from installations_api.lifecycle.statuses import (
    InstallationStatus,
    MilestoneStatus,
    MilestoneType,
    PermitStatus,
    PermitType,
)
from installations_api.models import Customer, Installation, Milestone, Permit

logger = logging.getLogger(__name__)

NUMBER_PREFIX = "INS-"
NUMBER_WIDTH = 6
NUMBER_ATTEMPTS = 5

M = TypeVar("M", Customer, Installation, Milestone, Permit)


def format_installation_number(sequence: int) -> str:
    return f"{NUMBER_PREFIX}{sequence:0{NUMBER_WIDTH}d}"


class InstallationStore:
    """Tenant-scoped persistence for installations and their milestones and permits.

    Every read filters on ``tenant_id``; a row owned by another tenant is
    reported as missing. Writes are staged on the session and only become
    visible on :meth:`commit`.
    """

    def __init__(self, db: Session, tenant_id: str):
        if not str(tenant_id or "").strip():
            raise ValueError("tenant_id is required")
        self.db = db
        self.tenant_id = tenant_id

    def _get(self, model: Type[M], entity: str, entity_id: str, *, lock: bool = False) -> M:
        stmt = select(model).where(model.id == entity_id, model.tenant_id == self.tenant_id)
        if lock:
            stmt = stmt.with_for_update()
        try:
            row = self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"failed to load {entity} {entity_id}: {exc.__class__.__name__}") from exc
        if row is None:
            raise NotFound(entity, entity_id)
        return row

    def get_customer(self, customer_id: str) -> Customer:
        return self._get(Customer, "customer", customer_id)

    def get_installation(self, installation_id: str, *, lock: bool = False) -> Installation:
        return self._get(Installation, "installation", installation_id, lock=lock)

    def get_milestone(self, milestone_id: str, *, lock: bool = False) -> Milestone:
        return self._get(Milestone, "milestone", milestone_id, lock=lock)

    def get_permit(self, permit_id: str, *, lock: bool = False) -> Permit:
        return self._get(Permit, "permit", permit_id, lock=lock)

    def list_installations(
        self,
        *,
        status: Optional[InstallationStatus] = None,
        search: Optional[str] = None,
    ) -> List[Installation]:
        """Tenant installations soonest first; ``search`` matches number or address."""
        stmt = select(Installation).where(Installation.tenant_id == self.tenant_id)
        if status is not None:
            stmt = stmt.where(Installation.status == status.value)
        term = str(search or "").strip().lower()
        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(
                or_(
                    func.lower(Installation.installation_number).like(pattern),
                    func.lower(Installation.installation_address).like(pattern),
                )
            )
        stmt = stmt.order_by(Installation.scheduled_date, Installation.installation_number)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"failed to list installations: {exc.__class__.__name__}") from exc

    def count_by_status(self) -> Dict[str, int]:
        stmt = (
            select(Installation.status, func.count(Installation.id))
            .where(Installation.tenant_id == self.tenant_id)
            .group_by(Installation.status)
        )
        counts = {item.value: 0 for item in InstallationStatus}
        try:
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"failed to count installations: {exc.__class__.__name__}") from exc
        for status, total in rows:
            counts[status] = total
        return counts

    def list_milestones(self, installation_id: str) -> List[Milestone]:
        self.get_installation(installation_id)
        stmt = (
            select(Milestone)
            .where(Milestone.installation_id == installation_id, Milestone.tenant_id == self.tenant_id)
            .order_by(Milestone.position, Milestone.created_at)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_permits(self, installation_id: str) -> List[Permit]:
        self.get_installation(installation_id)
        stmt = (
            select(Permit)
            .where(Permit.installation_id == installation_id, Permit.tenant_id == self.tenant_id)
            .order_by(Permit.created_at, Permit.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def set_installation_status(self, installation: Installation, new_status: InstallationStatus, today: date) -> Installation:
        installation.status = new_status.value
        # completed_date is history: stamped once, never cleared.
        if new_status == InstallationStatus.COMPLETED and installation.completed_date is None:
            installation.completed_date = today
        return installation

    def _next_installation_number(self, offset: int = 0) -> str:
        # Installations are never deleted, so the row count is the last issued sequence.
        stmt = select(func.count(Installation.id)).where(Installation.tenant_id == self.tenant_id)
        issued = self.db.execute(stmt).scalar() or 0
        return format_installation_number(issued + 1 + offset)

    def create_installation(
        self,
        *,
        customer_id: str,
        installation_address: str,
        scheduled_date: date,
        system_size: Optional[Decimal] = None,
        total_value: Optional[Decimal] = None,
        installer_notes: Optional[str] = None,
        customer_notes: Optional[str] = None,
    ) -> Installation:
        self.get_customer(customer_id)
        for attempt in range(NUMBER_ATTEMPTS):
            installation = Installation(
                tenant_id=self.tenant_id,
                customer_id=customer_id,
                installation_number=self._next_installation_number(attempt),
                installation_address=installation_address,
                scheduled_date=scheduled_date,
                system_size=system_size,
                total_value=total_value,
                installer_notes=installer_notes,
                customer_notes=customer_notes,
                status=InstallationStatus.SCHEDULED.value,
            )
            self.db.add(installation)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(
                    "Installation number collision, retrying",
                    extra={"tenant_id": self.tenant_id, "attempt": attempt + 1},
                )
                continue
            except SQLAlchemyError as exc:
                self.db.rollback()
                raise PersistenceFailure(f"could not create installation: {exc.__class__.__name__}") from exc
            logger.info(
                "Installation created number=%s tenant=%s",
                installation.installation_number,
                self.tenant_id,
            )
            return installation
        raise PersistenceFailure("could not allocate a unique installation number")

    def add_milestone(
        self,
        installation_id: str,
        *,
        milestone_type: MilestoneType,
        milestone_name: str,
        scheduled_date: Optional[date] = None,
        assigned_to: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Milestone:
        self.get_installation(installation_id)
        stmt = select(func.max(Milestone.position)).where(
            Milestone.installation_id == installation_id, Milestone.tenant_id == self.tenant_id
        )
        last_position = self.db.execute(stmt).scalar()
        milestone = Milestone(
            tenant_id=self.tenant_id,
            installation_id=installation_id,
            position=0 if last_position is None else last_position + 1,
            milestone_type=milestone_type.value,
            milestone_name=milestone_name,
            scheduled_date=scheduled_date,
            assigned_to=assigned_to,
            notes=notes,
            status=MilestoneStatus.PENDING.value,
        )
        self.db.add(milestone)
        self.commit()
        return milestone

    def add_permit(
        self,
        installation_id: str,
        *,
        permit_type: PermitType,
        permit_number: Optional[str] = None,
        issuing_authority: Optional[str] = None,
        application_date: Optional[date] = None,
        expiration_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Permit:
        self.get_installation(installation_id)
        permit = Permit(
            tenant_id=self.tenant_id,
            installation_id=installation_id,
            permit_type=permit_type.value,
            permit_number=permit_number,
            issuing_authority=issuing_authority,
            application_date=application_date,
            expiration_date=expiration_date,
            notes=notes,
            status=PermitStatus.NOT_SUBMITTED.value,
        )
        self.db.add(permit)
        self.commit()
        return permit

    def commit(self) -> None:
        try:
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            raise ConcurrentModification("record was modified by another request") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("commit failed", extra={"tenant_id": self.tenant_id})
            raise PersistenceFailure(f"could not persist change: {exc.__class__.__name__}") from exc

    def rollback(self) -> None:
        self.db.rollback()

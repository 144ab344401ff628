from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Optional

from installations_api.customers import CustomerContact
from installations_api.models import Installation


def format_display_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return f"{value.month}/{value.day}/{value.year}"


@dataclass(frozen=True)
class NotificationEvent:
    customer_email: str
    customer_name: str
    installation_number: str
    status: str
    milestone: Optional[str] = None
    next_step: Optional[str] = None
    scheduled_date: Optional[str] = None
    completed_date: Optional[str] = None

    @classmethod
    def for_installation(
        cls,
        installation: Installation,
        contact: CustomerContact,
        *,
        status: Optional[str] = None,
        milestone: Optional[str] = None,
        next_step: Optional[str] = None,
    ) -> "NotificationEvent":
        return cls(
            customer_email=contact.email,
            customer_name=contact.display_name,
            installation_number=installation.installation_number,
            status=status or installation.status or "in_progress",
            milestone=milestone,
            next_step=next_step,
            scheduled_date=format_display_date(installation.scheduled_date),
            completed_date=format_display_date(installation.completed_date),
        )


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class DispatchResult:
    sent: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, message_id: Optional[str]) -> "DispatchResult":
        return cls(sent=True, message_id=message_id)

    @classmethod
    def failure(cls, error: str) -> "DispatchResult":
        return cls(sent=False, error=error)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

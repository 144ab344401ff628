import logging
from typing import Any, Dict, Optional, Protocol

from installations_api import config as settings
from installations_api.errors import DispatchFailure
from installations_api.notifications.events import DispatchResult, NotificationEvent, RenderedMessage
from installations_api.notifications.notifiers import AwsSesNotifier, LogNotifier, ResendNotifier
from installations_api.notifications.templates import render_message

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    notifier_type: str

    def send(self, message: RenderedMessage, recipient: str) -> Optional[str]:
        ...


def notification_config_from_env() -> Dict[str, Any]:
    return {
        "enabled": settings.notifications_enabled(),
        "type": settings.notify_transport(),
        "from_address": settings.notify_from_address(),
        "timeout": settings.notify_timeout(),
        "resend": {"api_key": settings.resend_api_key()},
        "aws_ses": {"region": settings.ses_region()},
    }


class NotifierRegistry:
    def __init__(self, config: Dict[str, Any]):
        self.config = config or {}

    def enabled(self) -> bool:
        return self.config.get("enabled", True) is not False

    def build_notifier(self) -> Optional[Notifier]:
        if not self.enabled():
            return None
        ntype = str(self.config.get("type") or "log").strip().lower()
        from_address = str(self.config.get("from_address") or "").strip()
        if ntype == "log":
            return LogNotifier()
        if ntype == "resend":
            resend_cfg = self.config.get("resend") if isinstance(self.config.get("resend"), dict) else {}
            api_key = str(resend_cfg.get("api_key") or "").strip()
            if not api_key:
                logger.warning("Resend notifier configured without an API key; notifications disabled")
                return None
            return ResendNotifier(api_key, from_address, timeout=float(self.config.get("timeout") or 10.0))
        if ntype == "aws_ses":
            ses_cfg = self.config.get("aws_ses") if isinstance(self.config.get("aws_ses"), dict) else {}
            return AwsSesNotifier(
                from_address,
                region=str(ses_cfg.get("region") or "").strip(),
                configuration_set=str(ses_cfg.get("configuration_set") or "").strip(),
            )
        logger.warning("Unknown notifier type %s; notifications disabled", ntype)
        return None


class NotificationDispatcher:
    """Renders a customer update and hands it to a single notifier.

    ``send`` never raises for delivery problems: failures come back as a
    failed :class:`DispatchResult` so the caller can offer a manual resend.
    Nothing is retried or queued here.
    """

    def __init__(self, notifier: Optional[Notifier]):
        self.notifier = notifier

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "NotificationDispatcher":
        return cls(NotifierRegistry(config).build_notifier())

    def send(self, event: NotificationEvent) -> DispatchResult:
        if self.notifier is None:
            return DispatchResult.failure("notifications disabled")
        if not str(event.customer_email or "").strip():
            return DispatchResult.failure("customer has no email address")
        message = render_message(event)
        try:
            message_id = self.notifier.send(message, event.customer_email)
        except DispatchFailure as exc:
            logger.warning(
                "Customer update failed installation=%s status=%s: %s",
                event.installation_number,
                event.status,
                exc,
            )
            return DispatchResult.failure(str(exc))
        except Exception as exc:
            logger.exception(
                "Customer update notifier crashed installation=%s notifier=%s",
                event.installation_number,
                getattr(self.notifier, "notifier_type", "unknown"),
            )
            return DispatchResult.failure(f"{getattr(self.notifier, 'notifier_type', 'unknown')}: {exc.__class__.__name__}")
        logger.info(
            "Customer update sent installation=%s status=%s message_id=%s",
            event.installation_number,
            event.status,
            message_id,
        )
        return DispatchResult.success(message_id)


def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher.from_config(notification_config_from_env())

import logging
import uuid
from typing import Optional

from installations_api.notifications.events import RenderedMessage

logger = logging.getLogger(__name__)


class LogNotifier:
    notifier_type = "log"

    def send(self, message: RenderedMessage, recipient: str) -> Optional[str]:
        message_id = f"log-{uuid.uuid4()}"
        logger.info("Customer update to=%s subject=%r id=%s", recipient, message.subject, message_id)
        logger.debug("Customer update body:\n%s", message.text)
        return message_id

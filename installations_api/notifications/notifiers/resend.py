from typing import Any, Dict, Optional

import requests

from installations_api.errors import DispatchFailure
from installations_api.notifications.events import RenderedMessage

RESEND_API_URL = "https://api.resend.com/emails"


class ResendNotifier:
    notifier_type = "resend"

    def __init__(self, api_key: str, from_address: str, *, timeout: float = 10.0, api_url: Optional[str] = None):
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout
        self.api_url = api_url or RESEND_API_URL

    def send(self, message: RenderedMessage, recipient: str) -> Optional[str]:
        payload: Dict[str, Any] = {
            "from": self.from_address,
            "to": [recipient],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DispatchFailure(f"resend request failed: {exc.__class__.__name__}") from exc
        if response.status_code >= 400:
            detail = response.text
            try:
                detail = response.json().get("message") or detail
            except ValueError:
                pass
            raise DispatchFailure(f"resend rejected message ({response.status_code}): {detail}")
        try:
            return response.json().get("id")
        except ValueError:
            return None

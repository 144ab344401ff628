from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from installations_api.errors import DispatchFailure
from installations_api.notifications.events import RenderedMessage


class AwsSesNotifier:
    notifier_type = "aws_ses"

    def __init__(self, from_address: str, *, region: str = "", configuration_set: str = ""):
        self.from_address = from_address
        self.region = region
        self.configuration_set = configuration_set

    def send(self, message: RenderedMessage, recipient: str) -> Optional[str]:
        client = boto3.client("ses", region_name=self.region) if self.region else boto3.client("ses")
        kwargs: Dict[str, Any] = {
            "Source": self.from_address,
            "Destination": {"ToAddresses": [recipient]},
            "Message": {
                "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                "Body": {
                    "Html": {"Data": message.html, "Charset": "UTF-8"},
                    "Text": {"Data": message.text, "Charset": "UTF-8"},
                },
            },
        }
        if self.configuration_set:
            kwargs["ConfigurationSetName"] = self.configuration_set
        try:
            response = client.send_email(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise DispatchFailure(f"ses send failed: {exc.__class__.__name__}") from exc
        return response.get("MessageId")

from .aws_ses import AwsSesNotifier
from .log import LogNotifier
from .resend import ResendNotifier

__all__ = ["AwsSesNotifier", "LogNotifier", "ResendNotifier"]

"""In-memory email channel used in development and tests.

Every accepted message lands in ``sent_emails``. ``configure`` makes the
channel refuse messages, which is how the retry path is exercised without a
real provider.
"""

from uuid import uuid4

import structlog
from notifications.channel.email_port import EmailPort, SendResult

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_REASON = "Email delivery failed"


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.sent_emails: list[dict] = []
        self.configure()

    def configure(self, should_succeed: bool = True, failure_reason: str = DEFAULT_FAILURE_REASON) -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> SendResult:
        if not self.should_succeed:
            return SendResult.failed(self.failure_reason)

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append(
            dict(message_id=message_id, to=to, subject=subject, body=body, html_body=html_body)
        )
        logger.debug("Fake email recorded", to=to, subject=subject, message_id=message_id)
        return SendResult.sent(message_id)

    def emails_to(self, address: str) -> list[dict]:
        return [email for email in self.sent_emails if email["to"] == address]

    def reset(self) -> None:
        self.sent_emails.clear()
        self.configure()

"""Resend email adapter: delivers notifications through the Resend API."""

import resend
import structlog
from notifications.channel.email_port import EmailPort, SendResult
from resend.exceptions import ResendError

logger = structlog.get_logger(__name__)

DEFAULT_SENDER = "3rd Hand Art Marketplace <no-reply@thirdhand.art>"


class ResendEmailAdapter(EmailPort):
    def __init__(self, api_key: str, sender: str | None = None):
        if not api_key:
            raise ValueError("RESEND_API_KEY must be set to use the Resend email channel")
        self.api_key = api_key
        self.sender = sender or DEFAULT_SENDER

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> SendResult:
        payload = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "text": body,
        }
        if html_body:
            payload["html"] = html_body

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(payload)
        except ResendError as exc:
            logger.warning("Resend rejected email", to=to, subject=subject, error=str(exc))
            return SendResult.failed(str(exc))

        message_id = response.get("id") if isinstance(response, dict) else None
        if not message_id:
            return SendResult.failed(f"Unexpected Resend response: {response}")
        return SendResult.sent(message_id)

"""Email channel port.

Adapters never raise for a message the provider refused: the refusal comes
back as a failed ``SendResult`` and the dispatcher records it on the
notification. Exceptions are reserved for misconfiguration and transport
errors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SendResult:
    message_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.message_id is not None

    @classmethod
    def sent(cls, message_id: str) -> "SendResult":
        return cls(message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> "SendResult":
        return cls(error=error)


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> SendResult:
        """Hand one message to the provider."""

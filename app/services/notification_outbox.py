"""
Emails queued during a unit of work and sent only after it commits.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.core.email_service import EmailService, EmailTemplate, email_service

logger = logging.getLogger(__name__)


@dataclass
class QueuedEmail:
    template: EmailTemplate
    recipient: str
    variables: Dict[str, Any] = field(default_factory=dict)
    reply_to: Optional[str] = None


class NotificationOutbox:
    """Post-commit hook list. Nothing is sent until `flush()`; a failed send never raises."""

    def __init__(self, gateway: Optional[EmailService] = None):
        self.gateway = gateway or email_service
        self._queued: List[QueuedEmail] = []

    def queue(self, template: EmailTemplate, recipient: str, reply_to: Optional[str] = None,
              **variables: Any) -> None:
        self._queued.append(QueuedEmail(template, recipient, variables, reply_to))

    def flush(self) -> bool:
        """Send everything queued; True only if every email went out."""
        all_sent = True
        queued, self._queued = self._queued, []
        for item in queued:
            sent = self.gateway.send(item.template, item.recipient, item.variables, reply_to=item.reply_to)
            if not sent:
                logger.warning(f"{item.template.value} email to {item.recipient} was not sent")
                all_sent = False
        return all_sent

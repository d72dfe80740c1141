import asyncio
import logging
import time
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any

from app.config.settings import Settings
from app.errors import NotificationError

logger = logging.getLogger(__name__)


def _format_deadline(deadline: Any) -> str:
    if not deadline:
        return "No deadline set"
    if isinstance(deadline, (date, datetime)):
        return deadline.strftime("%Y-%m-%d")
    return str(deadline)


class NotificationService:
    """Simulated email delivery. Messages are logged, nothing leaves the process."""

    @staticmethod
    def build_assignment_email(
        recipient_email: str,
        title: str,
        assigner_name: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, str]:
        details = details or {}
        priority = str(details.get("priority") or "medium").capitalize()
        body = "\n".join([
            "Dear User,",
            "",
            f"You have been assigned a new task by {assigner_name}.",
            "",
            "Task Details:",
            f"- Title: {title}",
            f"- Priority: {priority}",
            f"- Deadline: {_format_deadline(details.get('deadline'))}",
            "- Status: Pending",
            "",
            "Please log in to your TaskFlow dashboard to view the complete task details and update the status.",
            "",
            "Best regards,",
            "TaskFlow Team",
        ])
        return {
            "to": recipient_email,
            "subject": f"New Task Assigned: {title}",
            "from": Settings.NOTIFICATIONS['sender'],
            "body": body,
        }

    @staticmethod
    async def notify_assignment(
        recipient_email: str,
        title: str,
        assigner_name: str,
        details: Optional[Dict[str, Any]] = None,
        delay_ms: Optional[int] = None
    ) -> Dict[str, Any]:
        """Log the assignment email after a simulated network delay and return a receipt"""
        if delay_ms is None:
            delay_ms = Settings.NOTIFICATIONS['delay_ms']
        try:
            email = NotificationService.build_assignment_email(recipient_email, title, assigner_name, details)

            logger.info(
                "Email notification sent\nTo: %s\nSubject: %s\nFrom: %s\n%s",
                email["to"], email["subject"], email["from"], email["body"],
            )

            if delay_ms > 0:
                await asyncio.sleep(delay_ms / 1000)

            return {
                "success": True,
                "message": "Email notification sent successfully",
                "email_id": f"email_{int(time.time() * 1000)}",
                "sent_at": datetime.now(timezone.utc),
            }
        except Exception as e:
            logger.error("Error sending email notification: %s", e)
            raise NotificationError(f"Failed to send notification to {recipient_email}") from e

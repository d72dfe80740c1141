# tests/test_notification_service.py
import asyncio
import logging
from datetime import date

import pytest

from app.errors import NotificationError
from app.services.notification_service import NotificationService


def test_notify_assignment_returns_a_receipt(caplog):
    with caplog.at_level(logging.INFO, logger="app.services.notification_service"):
        receipt = asyncio.run(NotificationService.notify_assignment(
            "a@x.com", "Write report", "Admin", {"priority": "high", "deadline": date(2030, 5, 1)}, delay_ms=0
        ))

    assert receipt["success"] is True
    assert receipt["email_id"].startswith("email_")
    assert receipt["sent_at"] is not None
    assert "New Task Assigned: Write report" in caplog.text
    assert "a@x.com" in caplog.text


def test_assignment_email_contents():
    email = NotificationService.build_assignment_email("a@x.com", "T", "Admin", {"priority": "high"})
    assert email["to"] == "a@x.com"
    assert email["subject"] == "New Task Assigned: T"
    assert email["from"] == "noreply@taskflow.com"
    assert "assigned a new task by Admin" in email["body"]
    assert "Priority: High" in email["body"]
    assert "Deadline: No deadline set" in email["body"]
    assert "Status: Pending" in email["body"]


def test_failures_are_raised_as_notification_error(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(NotificationService, "build_assignment_email", staticmethod(boom))
    with pytest.raises(NotificationError):
        asyncio.run(NotificationService.notify_assignment("a@x.com", "T", "Admin", delay_ms=0))

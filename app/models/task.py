# app/models/task.py
import enum
from datetime import datetime, time
from typing import Optional

from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.user import new_id, utcnow


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, index=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    assigned_to = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Creator id and display name are copied in at creation and never change
    assigned_by = Column(String(32), nullable=False)
    assigned_by_name = Column(String, nullable=False)

    status = Column(String, default=TaskStatus.PENDING.value, nullable=False)
    priority = Column(String, default=TaskPriority.MEDIUM.value, nullable=False)
    deadline = Column(Date, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="assigned_tasks")

    @property
    def overdue(self) -> bool:
        return is_overdue(self.deadline, self.status)

    @property
    def next_status(self) -> Optional[str]:
        return next_status(self.status)


def is_overdue(deadline, status, now: Optional[datetime] = None) -> bool:
    """
    True when a deadline is set, has passed, and the task is not Completed.

    A bare date counts from midnight of that day.
    """
    if deadline is None:
        return False
    if now is None:
        now = utcnow()
    if not isinstance(deadline, datetime):
        deadline = datetime.combine(deadline, time.min)
    return deadline < now and status != TaskStatus.COMPLETED.value


def next_status(status: str) -> Optional[str]:
    """The forward transition offered to assignees; None once Completed"""
    order = [s.value for s in TaskStatus]
    if status not in order:
        return TaskStatus.PENDING.value
    index = order.index(status)
    return order[index + 1] if index + 1 < len(order) else None

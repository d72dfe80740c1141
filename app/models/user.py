# app/models/user.py
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every timestamp column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    __tablename__ = "users"

    # Shared with Identity.uid, the identity provider assigns it
    id = Column(String(32), primary_key=True, index=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default=UserRole.USER.value, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Deleting a user removes the tasks assigned to them
    assigned_tasks = relationship(
        "Task", back_populates="assignee", foreign_keys="Task.assigned_to", cascade="all, delete"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

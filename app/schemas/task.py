from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date, datetime
from app.schemas.user import CAMEL_CONFIG
from app.schemas.notification import NotificationReceipt

Status = Literal["Pending", "In Progress", "Completed"]
Priority = Literal["low", "medium", "high"]

class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    assigned_to: str
    priority: Priority = "medium"
    deadline: Optional[date] = None
    # Accepted for compatibility with older clients, always replaced by "Pending"
    status: Optional[str] = None

    model_config = CAMEL_CONFIG

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[Priority] = None
    deadline: Optional[date] = None
    status: Optional[Status] = None

    model_config = CAMEL_CONFIG

class TaskStatusUpdate(BaseModel):
    status: Status

class TaskOut(BaseModel):
    id: str
    title: str
    description: str
    assigned_to: str
    assigned_by: str
    assigned_by_name: str
    status: Status
    priority: Priority
    deadline: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    overdue: bool = False
    next_status: Optional[Status] = None

    model_config = CAMEL_CONFIG

class TaskCreated(BaseModel):
    task: TaskOut
    message: str
    notification: Optional[NotificationReceipt] = None

    model_config = CAMEL_CONFIG

class DashboardStats(BaseModel):
    total_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    overdue_tasks: int
    total_users: int
    completion_rate: int

    model_config = CAMEL_CONFIG

from .user import User, UserRole
from .task import Task, TaskStatus, TaskPriority, is_overdue, next_status
from .identity import Identity

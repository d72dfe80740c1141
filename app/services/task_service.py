# app/services/task_service.py
"""
Task service: CRUD over the `tasks` collection plus the derived statistics
shown on the dashboards.
"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import Settings
from app.errors import StoreError, ValidationError
from app.models.task import Task, TaskPriority, TaskStatus, is_overdue, next_status
from app.models.user import User, utcnow

logger = logging.getLogger(__name__)

STATUSES = [status.value for status in TaskStatus]
PRIORITIES = {priority.value for priority in TaskPriority}
# assigned_by and assigned_by_name are fixed at creation
EDITABLE_FIELDS = {"title", "description", "assigned_to", "priority", "deadline", "status"}

__all__ = ["TaskService", "is_overdue", "next_status", "dashboard_stats"]


def dashboard_stats(tasks: Iterable[Task], total_users: int = 0, now: Optional[datetime] = None) -> dict:
    tasks = list(tasks)
    completed = sum(task.status == TaskStatus.COMPLETED.value for task in tasks)
    return {
        "total_tasks": len(tasks),
        "pending_tasks": sum(task.status == TaskStatus.PENDING.value for task in tasks),
        "in_progress_tasks": sum(task.status == TaskStatus.IN_PROGRESS.value for task in tasks),
        "completed_tasks": completed,
        "overdue_tasks": sum(is_overdue(task.deadline, task.status, now) for task in tasks),
        "total_users": total_users,
        "completion_rate": _round_half_up(completed * 100 / len(tasks)) if tasks else 0,
    }


def _round_half_up(value: float) -> int:
    # round() goes half-to-even: 12.5 would become 12
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class TaskService:
    def __init__(self, db: Session, sorted_assignee_query: Optional[bool] = None):
        self.db = db
        if sorted_assignee_query is None:
            sorted_assignee_query = Settings.STORE['sorted_assignee_query']
        self.sorted_assignee_query = sorted_assignee_query

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error %s: %s", action, e)
            raise StoreError(f"Failed to {action}") from e

    def _check_assignee(self, user_id: str) -> None:
        if not user_id or self.db.query(User.id).filter(User.id == user_id).first() is None:
            raise ValidationError("Assigned user does not exist")

    def _check_priority(self, priority: str) -> None:
        if priority not in PRIORITIES:
            raise ValidationError(f"Unknown priority '{priority}'")

    def _check_status(self, status: str) -> None:
        if status not in STATUSES:
            raise ValidationError(f"Unknown status '{status}'")

    def create(self, data: dict, assigned_by: User) -> Task:
        """
        Create a task assigned by `assigned_by`.

        Any status in `data` is ignored: new tasks always start as Pending.
        """
        priority = data.get("priority") or TaskPriority.MEDIUM.value
        self._check_priority(priority)
        self._check_assignee(data.get("assigned_to"))
        logger.info("Creating task with data: %s", data)

        task = Task(
            title=data["title"],
            description=data.get("description") or "",
            assigned_to=data["assigned_to"],
            assigned_by=assigned_by.id,
            assigned_by_name=assigned_by.name or assigned_by.email,
            status=TaskStatus.PENDING.value,
            priority=priority,
            deadline=data.get("deadline"),
        )
        self.db.add(task)
        self._commit("save task")
        self.db.refresh(task)
        logger.info("Task created with ID: %s", task.id)
        return task

    def list(self) -> List[Task]:
        """All tasks, newest first"""
        try:
            return self.db.query(Task).order_by(Task.created_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error("Error getting tasks: %s", e)
            raise StoreError("Failed to load tasks") from e

    def list_for_user(self, user_id: str) -> List[Task]:
        """Tasks assigned to one user, newest first"""
        query = self.db.query(Task).filter(Task.assigned_to == user_id)
        try:
            if self.sorted_assignee_query:
                return query.order_by(Task.created_at.desc()).all()
            tasks = query.all()
        except SQLAlchemyError as e:
            logger.error("Error getting user tasks: %s", e)
            raise StoreError("Failed to load tasks") from e

        # Store can't sort a filtered query, sort here
        return sorted(tasks, key=lambda task: task.created_at or datetime.min, reverse=True)

    def get_by_id(self, task_id: str) -> Optional[Task]:
        try:
            return self.db.query(Task).filter(Task.id == task_id).first()
        except SQLAlchemyError as e:
            logger.error("Error getting task: %s", e)
            raise StoreError("Failed to load task") from e

    def update_status(self, task_id: str, status: str) -> Optional[Task]:
        """Change only status and updated_at"""
        self._check_status(status)
        task = self.get_by_id(task_id)
        if task is None:
            return None

        old_status = task.status
        task.status = status
        task.updated_at = utcnow()
        self._commit("update task status")
        self.db.refresh(task)
        logger.info("Task %s status %s -> %s", task_id, old_status, status)
        return task

    def update(self, task_id: str, partial: dict) -> Optional[Task]:
        """Administrative edit of any editable field"""
        task = self.get_by_id(task_id)
        if task is None:
            return None

        changes = {k: v for k, v in partial.items() if k in EDITABLE_FIELDS}
        # Only deadline may be cleared; a null for a required field means "leave it"
        for field in ("title", "priority", "status", "assigned_to"):
            if field in changes and changes[field] is None:
                del changes[field]
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""

        if "priority" in changes:
            self._check_priority(changes["priority"])
        if "status" in changes:
            self._check_status(changes["status"])
        if "assigned_to" in changes:
            self._check_assignee(changes["assigned_to"])

        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utcnow()

        self._commit("update task")
        self.db.refresh(task)
        logger.info("Task %s updated: %s", task_id, sorted(changes))
        return task

    def delete(self, task_id: str) -> bool:
        """False when there was nothing to delete"""
        task = self.get_by_id(task_id)
        if task is None:
            logger.info("Delete of unknown task %s ignored", task_id)
            return False

        self.db.delete(task)
        self._commit("delete task")
        logger.info("Task %s deleted", task_id)
        return True

    def count_overdue(self, now: Optional[datetime] = None) -> int:
        tasks = (
            self.db.query(Task)
            .filter(Task.deadline.isnot(None), Task.status != TaskStatus.COMPLETED.value)
            .all()
        )
        return sum(is_overdue(task.deadline, task.status, now) for task in tasks)

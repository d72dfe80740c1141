import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.errors import NotFoundError, NotificationError, PermissionDenied, ValidationError
from app.models.user import User
from app.schemas import task as task_schema
from app.services.notification_service import NotificationService
from app.services.task_service import TaskService
from app.utils.auth import Capability, SessionContext, require

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=task_schema.TaskCreated, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: task_schema.TaskCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_TASKS))
):
    db_task = TaskService(db).create(task.model_dump(exclude={"status"}), assigned_by=session.user)
    task_out = task_schema.TaskOut.model_validate(db_task)

    # The task is committed; the notification outcome only changes the message
    assigned_user = db.query(User).filter(User.id == db_task.assigned_to).first()
    if assigned_user is None:
        return {"task": task_out, "message": "Task created successfully!"}

    try:
        receipt = await NotificationService.notify_assignment(
            assigned_user.email,
            db_task.title,
            db_task.assigned_by_name,
            {
                "priority": db_task.priority,
                "deadline": db_task.deadline,
                "description": db_task.description,
            },
        )
    except NotificationError as notification_error:
        logger.warning("Failed to send email notification: %s", notification_error)
        return {"task": task_out, "message": "Task created successfully! (Email notification failed)"}

    logger.info("Email notification sent to %s for task: %s", assigned_user.email, db_task.title)
    return {
        "task": task_out,
        "message": f"Task created successfully! Email notification sent to {assigned_user.email}",
        "notification": receipt,
    }

@router.get("/", response_model=List[task_schema.TaskOut])
def get_all_tasks(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.VIEW_ALL_TASKS))
):
    return TaskService(db).list()

@router.get("/mine", response_model=List[task_schema.TaskOut])
def get_my_tasks(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.VIEW_OWN_TASKS))
):
    return TaskService(db).list_for_user(session.user.id)

@router.get("/{task_id}", response_model=task_schema.TaskOut)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.VIEW_OWN_TASKS))
):
    task = TaskService(db).get_by_id(task_id)
    # Non-admins only see their own tasks; others look like missing ones
    if task is None or (not session.can(Capability.VIEW_ALL_TASKS) and task.assigned_to != session.user.id):
        raise NotFoundError("Task not found")
    return task

@router.put("/{task_id}", response_model=task_schema.TaskOut)
def update_task(
    task_id: str,
    task_update: task_schema.TaskUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_TASKS))
):
    update_data = task_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("Nothing to update")
    task = TaskService(db).update(task_id, update_data)
    if task is None:
        raise NotFoundError("Task not found")
    return task

@router.patch("/{task_id}/status", response_model=task_schema.TaskOut)
def update_task_status(
    task_id: str,
    status_update: task_schema.TaskStatusUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.UPDATE_OWN_TASK_STATUS))
):
    service = TaskService(db)
    task = service.get_by_id(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    if task.assigned_to != session.user.id and not session.can(Capability.MANAGE_TASKS):
        raise PermissionDenied("Task is not assigned to you")

    return service.update_status(task_id, status_update.status)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_TASKS))
):
    if not TaskService(db).delete(task_id):
        raise NotFoundError("Task not found")
    return None

# app/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.task import DashboardStats
from app.services.task_service import TaskService, dashboard_stats
from app.services.user_service import UserDirectoryService
from app.utils.auth import Capability, SessionContext, require

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("/overview", response_model=DashboardStats)
def get_dashboard_overview(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.VIEW_DASHBOARD))
):
    """Counts across every task and user"""
    tasks = TaskService(db).list()
    users = UserDirectoryService(db).list()
    return dashboard_stats(tasks, total_users=len(users))

@router.get("/mine", response_model=DashboardStats)
def get_my_dashboard(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.VIEW_OWN_TASKS))
):
    """Counts over the tasks assigned to the signed-in user"""
    return dashboard_stats(TaskService(db).list_for_user(session.user.id), total_users=1)

# app/services/scheduler.py
"""
Periodic overdue sweep. Purely informational: it logs how many open tasks
are past their deadline.
"""

import logging
from typing import Any, Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config.settings import Settings
from app.database import SessionLocal
from app.services.task_service import TaskService

logger = logging.getLogger(__name__)


class TaskScheduler:
    """Scheduler for the overdue task sweep"""

    def __init__(self, session_factory=SessionLocal, interval_minutes: int = None):
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory
        if interval_minutes is None:
            interval_minutes = Settings.SCHEDULER['overdue_sweep_minutes']
        self.interval_minutes = interval_minutes
        self.is_running = False

    def start(self):
        """Start the scheduler; an interval of 0 disables it"""
        if self.is_running or self.interval_minutes <= 0:
            return
        self.scheduler.add_job(
            self.check_overdue_tasks,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id='check_overdue_tasks',
            name='Check Overdue Tasks',
            replace_existing=True
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Task scheduler started, overdue sweep every %s minutes", self.interval_minutes)

    def stop(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Task scheduler stopped")

    async def check_overdue_tasks(self) -> int:
        """Count overdue tasks and log the result"""
        db = self.session_factory()
        try:
            overdue = TaskService(db).count_overdue()
            logger.info("Found %s overdue tasks", overdue)
            return overdue
        except Exception as e:
            logger.error("Error checking overdue tasks: %s", e)
            return 0
        finally:
            db.close()

    def get_scheduler_status(self) -> Dict[str, Any]:
        jobs = [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in self.scheduler.get_jobs()
        ]
        return {"status": "running" if self.is_running else "stopped", "jobs": jobs}


task_scheduler = TaskScheduler()

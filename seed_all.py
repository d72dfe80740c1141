"""
Database Seeding Script
Creates the tables, the default admin, and a handful of demo users and tasks
"""

from datetime import date, timedelta

from dotenv import load_dotenv

from app.database import SessionLocal
from app.errors import ValidationError
from app.models.user import User, UserRole
from app.services.task_service import TaskService
from app.services.user_service import UserDirectoryService
from create_tables import ADMIN_EMAIL, create_tables

load_dotenv()

DEMO_USERS = [
    {"name": "Priya Sharma", "email": "priya.sharma@company.com", "password": "password123"},
    {"name": "Arjun Singh", "email": "arjun.singh@company.com", "password": "password123"},
    {"name": "Deepika Patel", "email": "deepika.patel@company.com", "password": "password123"},
]

# assignee is an index into DEMO_USERS, deadline an offset in days from today
DEMO_TASKS = [
    {"title": "Set up CI pipeline", "description": "Run the test suite on every push", "assignee": 0, "priority": "high", "deadline": 3},
    {"title": "Write onboarding guide", "description": "Cover local setup and conventions", "assignee": 1, "priority": "medium", "deadline": 7},
    {"title": "Review Q3 budget", "description": "Flag items over the planned amount", "assignee": 2, "priority": "low", "deadline": -2},
    {"title": "Fix login redirect", "description": "Users land on a blank page after login", "assignee": 0, "priority": "high", "deadline": None},
]

def print_header(title: str):
    print(f"\n{'='*60}")
    print(f"🚀 {title}")
    print(f"{'='*60}")

def seed_demo_users(db) -> list:
    print_header("Creating Demo Users")
    service = UserDirectoryService(db)
    users = []
    for user_data in DEMO_USERS:
        existing = db.query(User).filter(User.email == user_data["email"]).first()
        if existing:
            print(f"[SKIP] User {user_data['email']} already exists, skipping...")
            users.append(existing)
            continue
        try:
            users.append(service.create(role=UserRole.USER.value, **user_data))
            print(f"[SUCCESS] Created user: {user_data['name']}")
        except ValidationError as e:
            print(f"[ERROR] {user_data['email']}: {e}")
    return users

def seed_demo_tasks(db, users: list):
    print_header("Creating Demo Tasks")
    admin = db.query(User).filter(User.email == ADMIN_EMAIL).first()
    if admin is None or len(users) < len(DEMO_USERS):
        print("[ERROR] Admin or demo users missing, skipping tasks")
        return

    service = TaskService(db)
    for task_data in DEMO_TASKS:
        offset = task_data["deadline"]
        service.create(
            {
                "title": task_data["title"],
                "description": task_data["description"],
                "assigned_to": users[task_data["assignee"]].id,
                "priority": task_data["priority"],
                "deadline": date.today() + timedelta(days=offset) if offset is not None else None,
            },
            assigned_by=admin,
        )
        print(f"[SUCCESS] Created task: {task_data['title']}")

def main():
    create_tables()
    db = SessionLocal()
    try:
        users = seed_demo_users(db)
        seed_demo_tasks(db, users)
    finally:
        db.close()
    print("\n[SUCCESS] Seeding completed!")

if __name__ == "__main__":
    main()

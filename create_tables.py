# create_tables.py
import os

from app.database import Base, SessionLocal, engine
from app.errors import ValidationError
from app.models import User, Task, Identity  # registers every table on Base.metadata
from app.models.user import UserRole
from app.services.user_service import UserDirectoryService

ADMIN_NAME = os.getenv("ADMIN_NAME", "System Administrator")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

def create_tables(drop: bool = False):
    """Create all tables, optionally dropping existing ones first"""
    if drop:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("✅ All tables created successfully!")

    create_default_admin()

def create_default_admin():
    """Create the first administrator account"""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.role == UserRole.ADMIN.value).count() > 0:
            print("ℹ️  Admin user already exists")
            return

        UserDirectoryService(db).create(
            name=ADMIN_NAME,
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            role=UserRole.ADMIN.value,
        )
        print("✅ Default admin user created!")
        print(f"   Email: {ADMIN_EMAIL}")
        print(f"   Password: {ADMIN_PASSWORD}")
    except ValidationError as e:
        print(f"❌ Error creating default admin: {e}")
    finally:
        db.close()

if __name__ == "__main__":
    create_tables(drop=os.getenv("DROP_TABLES", "false").lower() == "true")

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.config.settings import Settings

DATABASE_URL = Settings.DATABASE['url']

# SQLite needs check_same_thread off for FastAPI's threadpool; hosted Postgres keeps sslmode
if Settings.is_sqlite():
    connect_args = {"check_same_thread": False}
elif DATABASE_URL.startswith("postgresql"):
    connect_args = {"sslmode": Settings.DATABASE['sslmode']}
else:
    connect_args = {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    echo=Settings.DATABASE['echo'],
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Imported wherever a DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()

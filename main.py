import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config.settings import Settings
from app.database import Base, engine
from app.errors import TaskFlowError
from app.logging_setup import setup_logging
from app.routers import auth, users, tasks, dashboard
from app.services.scheduler import task_scheduler
from app.utils.auth import Capability, SessionContext, require

setup_logging(Settings.LOGGING['level'])
logger = logging.getLogger(__name__)

app = FastAPI(title="TaskFlow API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Service errors become a short display message; nothing is retried
@app.exception_handler(TaskFlowError)
async def taskflow_error_handler(request: Request, exc: TaskFlowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(dashboard.router)

@app.on_event("startup")
async def startup_event():
    logger.info("Starting TaskFlow API...")
    Base.metadata.create_all(bind=engine)
    task_scheduler.start()

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down TaskFlow API...")
    task_scheduler.stop()

@app.get("/")
def read_root():
    return {"message": "TaskFlow API"}

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/scheduler/status")
def get_scheduler_status(session: SessionContext = Depends(require(Capability.VIEW_DASHBOARD))):
    return task_scheduler.get_scheduler_status()

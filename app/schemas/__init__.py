from .user import UserCreate, SignupRequest, UserLogin, UserOut, UserUpdate, ProfileUpdate, PasswordResetRequest, PasswordResetConfirm
from .tokens import Token, SessionOut, PasswordResetIssued
from .notification import NotificationReceipt
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TaskCreated, DashboardStats

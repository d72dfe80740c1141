# app/utils/auth.py
"""
Authorization gate.

A request's bearer token is resolved into a SessionContext. The role is read
from the token, where it was captured at sign-in, so a role change made by an
administrator takes effect the next time the affected user signs in.
Each role maps to a view with an explicit capability set; routes declare the
capability they need with `require(...)`.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AuthError, PermissionDenied
from app.models.user import User, UserRole
from app.services.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class Capability(str, Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_TASKS = "manage_tasks"
    VIEW_ALL_TASKS = "view_all_tasks"
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_OWN_TASKS = "view_own_tasks"
    UPDATE_OWN_TASK_STATUS = "update_own_task_status"
    EDIT_OWN_PROFILE = "edit_own_profile"


@dataclass(frozen=True)
class AdminView:
    role: str = UserRole.ADMIN.value
    capabilities: frozenset = frozenset(Capability)


@dataclass(frozen=True)
class UserView:
    role: str = UserRole.USER.value
    capabilities: frozenset = frozenset({
        Capability.VIEW_OWN_TASKS,
        Capability.UPDATE_OWN_TASK_STATUS,
        Capability.EDIT_OWN_PROFILE,
    })


RoleView = Union[AdminView, UserView]


def view_for_role(role: str) -> RoleView:
    """Unknown or missing roles get the least privileged view"""
    if role == UserRole.ADMIN.value:
        return AdminView()
    return UserView()


@dataclass
class SessionContext:
    user: User
    role: str
    token: Optional[str] = None

    @property
    def view(self) -> RoleView:
        return view_for_role(self.role)

    @property
    def is_admin(self) -> bool:
        return isinstance(self.view, AdminView)

    def can(self, capability: Capability) -> bool:
        return capability in self.view.capabilities

    def require(self, capability: Capability) -> None:
        if not self.can(capability):
            logger.warning("User %s (%s) denied %s", self.user.id, self.role, capability.value)
            raise PermissionDenied("You do not have permission to perform this action")


def get_current_session(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> SessionContext:
    payload = IdentityProvider(db).verify_session_token(token)

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if user is None:
        # The directory record was deleted after this token was issued
        raise AuthError("auth/invalid-session")

    return SessionContext(user=user, role=payload.get("role") or UserRole.USER.value, token=token)


def require(capability: Capability):
    """Dependency factory: resolve the session and check one capability"""

    def dependency(session: SessionContext = Depends(get_current_session)) -> SessionContext:
        session.require(capability)
        return session

    return dependency


def guard_self_destruct(session: SessionContext, target_id: str, new_role: Optional[str] = None, deleting: bool = False) -> None:
    """
    Refuse to let a session delete its own user record or drop its own admin role.
    """
    if target_id != session.user.id:
        return
    if deleting:
        raise PermissionDenied("You cannot delete your own account")
    if session.is_admin and new_role is not None and new_role != UserRole.ADMIN.value:
        raise PermissionDenied("You cannot remove your own admin role")

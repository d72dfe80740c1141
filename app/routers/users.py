# app/routers/users.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.errors import NotFoundError, ValidationError
from app.schemas.user import Role, UserCreate, UserOut, UserUpdate, ProfileUpdate
from app.services.user_service import UserDirectoryService
from app.utils.auth import Capability, SessionContext, guard_self_destruct, require

router = APIRouter()

@router.get("/", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_USERS))
):
    """All users, newest first"""
    return UserDirectoryService(db).list()

@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_USERS))
):
    return UserDirectoryService(db).create(
        name=user.name, email=user.email, password=user.password, role=user.role
    )

@router.get("/role/{role}", response_model=List[UserOut])
def get_users_by_role(
    role: Role,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_TASKS))
):
    """Users holding one role, e.g. the assignee picker lists role 'user'"""
    return UserDirectoryService(db).list_by_role(role)

@router.get("/me/profile", response_model=UserOut)
def get_profile(session: SessionContext = Depends(require(Capability.EDIT_OWN_PROFILE))):
    return session.user

@router.put("/me/profile", response_model=UserOut)
def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.EDIT_OWN_PROFILE))
):
    """Name and email only; role is not editable here"""
    updated = UserDirectoryService(db).update(session.user.id, profile.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFoundError("User not found")
    return updated

@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_USERS))
):
    user = UserDirectoryService(db).get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_USERS))
):
    update_data = user_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("Nothing to update")
    guard_self_destruct(session, user_id, new_role=update_data.get("role"))

    user = UserDirectoryService(db).update(user_id, update_data)
    if user is None:
        raise NotFoundError("User not found")
    return user

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require(Capability.MANAGE_USERS))
):
    guard_self_destruct(session, user_id, deleting=True)
    if not UserDirectoryService(db).delete(user_id):
        raise NotFoundError("User not found")
    return None

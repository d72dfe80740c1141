# app/services/user_service.py
"""
User directory: CRUD over the `users` collection.

Account creation goes through the identity provider first so the directory
record and the credential share one id.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import AuthError, StoreError, ValidationError
from app.models.identity import Identity
from app.models.user import User, UserRole, utcnow
from app.services.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)

ROLES = {role.value for role in UserRole}
EDITABLE_FIELDS = {"name", "email", "role"}


class UserDirectoryService:
    def __init__(self, db: Session, identity: Optional[IdentityProvider] = None):
        self.db = db
        self.identity = identity or IdentityProvider(db)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error %s: %s", action, e)
            raise StoreError(f"Failed to {action}") from e

    def create(self, name: str, email: str, password: str, role: str = UserRole.USER.value) -> User:
        """Create the identity and the matching directory record"""
        if role not in ROLES:
            raise ValidationError(f"Unknown role '{role}'")
        try:
            self.identity.check_password_strength(password)
            identity = self.identity.create_account(email, password, display_name=name)
        except AuthError as e:
            # Duplicate email, bad email and weak password are input problems here
            raise ValidationError(f"Failed to save user. {e.message}", code=e.code) from e

        user = User(id=identity.uid, name=name, email=identity.email, role=role)
        self.db.add(user)
        self._commit("save user")
        self.db.refresh(user)
        logger.info("User created: %s <%s> role=%s", user.id, user.email, user.role)
        return user

    def ensure_profile(self, identity: Identity) -> User:
        """Directory record for a signed-in identity, created with role 'user' if missing"""
        user = self.get_by_id(identity.uid)
        if user is not None:
            return user

        user = User(
            id=identity.uid,
            name=identity.display_name or "User",
            email=identity.email,
            role=UserRole.USER.value,
        )
        self.db.add(user)
        self._commit("save user")
        self.db.refresh(user)
        logger.info("Default user record synthesized for %s", identity.email)
        return user

    def list(self) -> List[User]:
        try:
            return self.db.query(User).order_by(User.created_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error("Error getting users: %s", e)
            raise StoreError("Failed to load users") from e

    def list_by_role(self, role: str) -> List[User]:
        try:
            return (
                self.db.query(User)
                .filter(User.role == role)
                .order_by(User.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Error getting users by role: %s", e)
            raise StoreError("Failed to load users") from e

    def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            logger.error("Error getting user: %s", e)
            raise StoreError("Failed to load user") from e

    def update(self, user_id: str, partial: dict) -> Optional[User]:
        """Apply the given fields; returns None when the user does not exist"""
        user = self.get_by_id(user_id)
        if user is None:
            return None

        changes = {k: v for k, v in partial.items() if k in EDITABLE_FIELDS and v is not None}
        if "role" in changes and changes["role"] not in ROLES:
            raise ValidationError(f"Unknown role '{changes['role']}'")

        if "email" in changes or "name" in changes:
            try:
                identity = self.identity.update_profile(
                    user_id, display_name=changes.get("name"), email=changes.get("email")
                )
            except AuthError as e:
                raise ValidationError(f"Failed to save user. {e.message}", code=e.code) from e
            if identity is not None and "email" in changes:
                changes["email"] = identity.email

        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()

        self._commit("update user")
        self.db.refresh(user)
        logger.info("User %s updated: %s", user_id, sorted(changes))
        return user

    def delete(self, user_id: str) -> bool:
        """Remove the record and its identity; False when there was nothing to delete"""
        user = self.get_by_id(user_id)
        if user is None:
            logger.info("Delete of unknown user %s ignored", user_id)
            return False

        self.db.delete(user)
        self.identity.delete_account(user_id)
        self._commit("delete user")
        logger.info("User %s deleted", user_id)
        return True

# app/services/identity_provider.py
"""
Email/password identity provider.

Owns the credential records (the `identities` table), issues and verifies
session tokens, and runs the password reset flow. Failures are raised as
AuthError carrying a provider error code such as "auth/email-already-in-use".
"""

import logging
import time
import uuid
from datetime import timedelta
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import Settings
from app.errors import AuthError, describe_auth_error
from app.models.identity import Identity
from app.models.user import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_TOKEN = "session"
RESET_TOKEN = "reset"

# Token ids revoked by logout, mapped to the token expiry (epoch seconds).
# An id is dropped once its token would have expired anyway.
_revoked_tokens: dict[str, float] = {}

__all__ = ["IdentityProvider", "describe_auth_error", "hash_password", "verify_password"]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _prune_revoked(now: Optional[float] = None) -> None:
    now = time.time() if now is None else now
    for jti in [jti for jti, exp in _revoked_tokens.items() if exp <= now]:
        del _revoked_tokens[jti]


def _normalize_email(email: str) -> str:
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        raise AuthError("auth/invalid-email")


class IdentityProvider:
    def __init__(self, db: Session):
        self.db = db
        self.secret_key = Settings.IDENTITY['secret_key']
        self.algorithm = Settings.IDENTITY['algorithm']

    # Accounts

    def check_password_strength(self, password: str) -> None:
        if len(password or "") < Settings.IDENTITY['min_password_length']:
            raise AuthError("auth/weak-password")

    def find_by_email(self, email: str) -> Optional[Identity]:
        return self.db.query(Identity).filter(Identity.email == email.lower()).first()

    def get(self, uid: str) -> Optional[Identity]:
        return self.db.query(Identity).filter(Identity.uid == uid).first()

    def create_account(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        """Register a new email/password identity. Does not commit."""
        email = _normalize_email(email).lower()
        self.check_password_strength(password)
        if self.find_by_email(email):
            raise AuthError("auth/email-already-in-use")

        identity = Identity(
            email=email,
            hashed_password=hash_password(password),
            display_name=display_name,
        )
        self.db.add(identity)
        try:
            self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            self.db.rollback()
            raise AuthError("auth/email-already-in-use")

        logger.info("Identity created for %s (uid=%s)", email, identity.uid)
        return identity

    def sign_in(self, email: str, password: str) -> Identity:
        identity = self.find_by_email(email)
        if identity is None or not verify_password(password, identity.hashed_password):
            logger.info("Rejected sign-in for %s", email)
            raise AuthError("auth/invalid-credential")
        return identity

    def update_profile(self, uid: str, display_name: Optional[str] = None, email: Optional[str] = None) -> Optional[Identity]:
        identity = self.get(uid)
        if identity is None:
            return None
        if email is not None:
            email = _normalize_email(email).lower()
            other = self.find_by_email(email)
            if other is not None and other.uid != uid:
                raise AuthError("auth/email-already-in-use")
            identity.email = email
        if display_name is not None:
            identity.display_name = display_name
        return identity

    def delete_account(self, uid: str) -> bool:
        identity = self.get(uid)
        if identity is None:
            return False
        self.db.delete(identity)
        logger.info("Identity %s deleted", uid)
        return True

    # Tokens

    def _encode(self, claims: dict, expires_minutes: int) -> str:
        now = utcnow()
        payload = {
            **claims,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(minutes=expires_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> dict:
        return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])

    def issue_session_token(self, identity: Identity, role: str) -> str:
        """Session token for an identity; the role is captured once, at sign-in"""
        return self._encode(
            {"sub": identity.uid, "email": identity.email, "role": role, "typ": SESSION_TOKEN},
            Settings.IDENTITY['access_token_expire_minutes'],
        )

    def verify_session_token(self, token: str) -> dict:
        try:
            payload = self._decode(token)
        except JWTError:
            raise AuthError("auth/invalid-session")
        if payload.get("typ") != SESSION_TOKEN or not payload.get("sub"):
            raise AuthError("auth/invalid-session")
        _prune_revoked()
        if payload.get("jti") in _revoked_tokens:
            raise AuthError("auth/invalid-session")
        return payload

    def revoke_session_token(self, token: str) -> None:
        payload = self.verify_session_token(token)
        _revoked_tokens[payload["jti"]] = payload["exp"]
        logger.info("Session for uid=%s signed out", payload["sub"])

    # Password reset

    def send_password_reset(self, email: str) -> str:
        """
        Issue a password reset code for the account.

        There is no mail delivery: the code is written to the log in place of
        the email. The HTTP layer must not hand it back to the requester.
        """
        identity = self.find_by_email(email)
        if identity is None:
            raise AuthError("auth/user-not-found")
        # Binding the code to the current hash makes it single-use
        code = self._encode(
            {"sub": identity.uid, "typ": RESET_TOKEN, "pwd": identity.hashed_password[-16:]},
            Settings.IDENTITY['password_reset_expire_minutes'],
        )
        logger.info("Password reset requested for %s, code: %s", identity.email, code)
        return code

    def confirm_password_reset(self, code: str, new_password: str) -> Identity:
        try:
            payload = self._decode(code)
        except ExpiredSignatureError:
            raise AuthError("auth/expired-action-code")
        except JWTError:
            raise AuthError("auth/invalid-action-code")
        if payload.get("typ") != RESET_TOKEN:
            raise AuthError("auth/invalid-action-code")

        identity = self.get(payload.get("sub", ""))
        if identity is None or identity.hashed_password[-16:] != payload.get("pwd"):
            raise AuthError("auth/invalid-action-code")

        self.check_password_strength(new_password)
        identity.hashed_password = hash_password(new_password)
        logger.info("Password reset completed for uid=%s", identity.uid)
        return identity

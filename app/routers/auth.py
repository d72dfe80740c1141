# app/routers/auth.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AuthError, ValidationError
from app.schemas.tokens import Token, SessionOut, PasswordResetIssued
from app.schemas.user import SignupRequest, UserLogin, UserOut, PasswordResetRequest, PasswordResetConfirm
from app.services.identity_provider import IdentityProvider
from app.services.user_service import UserDirectoryService
from app.utils.auth import SessionContext, get_current_session

logger = logging.getLogger(__name__)

router = APIRouter()

def _token_response(provider: IdentityProvider, identity, user) -> dict:
    token = provider.issue_session_token(identity, role=user.role)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }

@router.post("/signup", response_model=Token)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """Self-service signup, always creates a regular user"""
    if payload.password != payload.confirm_password:
        raise ValidationError("Passwords do not match")

    provider = IdentityProvider(db)
    try:
        identity = provider.create_account(payload.email, payload.password, display_name=payload.name)
    except AuthError as e:
        raise AuthError(e.code, f"Failed to create an account. {e.message}")

    user = UserDirectoryService(db, provider).ensure_profile(identity)
    logger.info("New account signed up: %s", user.email)
    return _token_response(provider, identity, user)

@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    provider = IdentityProvider(db)
    identity = provider.sign_in(credentials.email, credentials.password)

    # First login without a directory record gets a default 'user' record
    user = UserDirectoryService(db, provider).ensure_profile(identity)
    logger.info("User %s signed in as %s", user.id, user.role)
    return _token_response(provider, identity, user)

@router.post("/logout")
def logout(session: SessionContext = Depends(get_current_session), db: Session = Depends(get_db)):
    IdentityProvider(db).revoke_session_token(session.token)
    return {"message": "Logged out"}

@router.get("/me", response_model=SessionOut)
def me(session: SessionContext = Depends(get_current_session)):
    return {
        "user": UserOut.model_validate(session.user),
        "role": session.role,
        "capabilities": sorted(cap.value for cap in session.view.capabilities),
    }

@router.post("/password-reset", response_model=PasswordResetIssued)
def request_password_reset(payload: PasswordResetRequest, db: Session = Depends(get_db)):
    try:
        IdentityProvider(db).send_password_reset(payload.email)
    except AuthError as e:
        raise AuthError(e.code, f"Failed to send password reset email. {e.message}")
    # The code goes to the account's mailbox only, never to the caller
    return {"message": "Password reset email sent. Check your inbox."}

@router.post("/password-reset/confirm")
def confirm_password_reset(payload: PasswordResetConfirm, db: Session = Depends(get_db)):
    if payload.password != payload.confirm_password:
        raise ValidationError("Passwords do not match")

    try:
        IdentityProvider(db).confirm_password_reset(payload.code, payload.password)
    except AuthError as e:
        raise AuthError(e.code, f"Failed to reset password. {e.message}")
    db.commit()
    return {"message": "Password has been reset. You can now log in with your new password."}

"""
Auth API routes - registration, login and token checks.

Registration always creates a plain "user"; administrator accounts are
created with backend/create_admin.py.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import CurrentUser, get_current_user
from expertcheck.errors import NotFound, Unauthorized, ValidationFailed
from expertcheck.models.user import User, ROLE_USER
from expertcheck.security import create_access_token, hash_password, verify_password
from expertcheck.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/auth")
logger = get_logger("auth")


# ── Pydantic schemas ─────────────────────────────────────────

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role or ROLE_USER,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.email, user.role or ROLE_USER)


@router.post("/register", status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create a user account and return a token for it."""
    email = request.email.strip().lower()
    username = request.username.strip()

    existing = db.query(User).filter(
        or_(User.email == email, User.username == username)
    ).first()
    if existing:
        if existing.email == email:
            raise ValidationFailed("A user with this email already exists")
        raise ValidationFailed("A user with this username already exists")

    password_hash, salt = hash_password(request.password)
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        password_salt=salt,
        role=ROLE_USER,
        created_at=datetime.now(timezone.utc)
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        db.rollback()
        raise ValidationFailed("A user with this email or username already exists")
    db.refresh(user)

    log_with_context(logger, "INFO", "User registered: {}".format(user.email),
                     context={"user_id": user.id})

    return {
        "success": True,
        "message": "User registered successfully",
        "token": issue_token(user),
        "user": serialize_user(user)
    }


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email + password for a bearer token."""
    email = request.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if not user:
        log_with_context(logger, "INFO", "Login for unknown email",
                         extra_data={"email": email})
        raise Unauthorized("No user with this email")

    if not verify_password(request.password, user.password_hash, user.password_salt):
        log_with_context(logger, "INFO", "Wrong password",
                         context={"user_id": user.id})
        raise Unauthorized("Wrong password")

    log_with_context(logger, "INFO", "User logged in: {}".format(user.email),
                     context={"user_id": user.id},
                     extra_data={"role": user.role})

    return {
        "success": True,
        "message": "Logged in successfully",
        "token": issue_token(user),
        "user": serialize_user(user)
    }


@router.get("/verify")
def verify(current_user: CurrentUser = Depends(get_current_user)):
    """Echo the identity behind a valid token."""
    return {
        "success": True,
        "message": "Token is valid",
        "user": {
            "id": current_user.id,
            "email": current_user.email,
            "role": current_user.role
        }
    }


@router.get("/profile")
def profile(current_user: CurrentUser = Depends(get_current_user),
            db: Session = Depends(get_db)):
    user = db.get(User, current_user.id)
    if not user:
        raise NotFound("User not found")
    return {"success": True, "user": serialize_user(user)}

"""
User API routes - current user lookup, user listing and a liveness ping.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import CurrentUser, get_current_user, require_admin
from expertcheck.errors import NotFound
from expertcheck.models.user import User
from expertcheck.routes.auth import serialize_user

router = APIRouter(prefix="/api")


@router.get("/test")
def server_test():
    """Public ping used by the frontend to check the API is reachable."""
    return {
        "success": True,
        "message": "Server is running",
        "time": datetime.now(timezone.utc).isoformat()
    }


@router.get("/me")
def get_current_user_info(current_user: CurrentUser = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    user = db.get(User, current_user.id)
    if not user:
        raise NotFound("User not found")
    return {"success": True, "user": serialize_user(user)}


@router.get("/users", dependencies=[Depends(require_admin)])
def list_users(db: Session = Depends(get_db)):
    """All registered users, newest first (administrators only)."""
    users = db.query(User).order_by(User.id.desc()).all()
    return {
        "success": True,
        "count": len(users),
        "users": [serialize_user(u) for u in users]
    }

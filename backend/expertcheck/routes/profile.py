"""
Profile API routes - user card with aggregate statistics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import CurrentUser, get_current_user
from expertcheck.errors import NotFound
from expertcheck.models.user import User
from expertcheck.services import reporting

router = APIRouter(prefix="/api/profile")

HISTORY_LIMIT = 10
BEST_COMPETENCES_LIMIT = 3


@router.get("")
def get_profile(current_user: CurrentUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    """User info, overall stats, recent attempts and strongest competences."""
    user = db.get(User, current_user.id)
    if not user:
        raise NotFound("User not found")

    stats = reporting.profile_stats(db, user.id)

    return {
        "success": True,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role,
            "createdAt": user.created_at.isoformat() if user.created_at else None
        },
        "stats": {
            "testsCompleted": stats["testsCompleted"],
            "avgResult": stats["avgResult"],
            "totalCorrect": stats["totalCorrect"],
            "totalQuestions": stats["totalQuestions"]
        },
        "testHistory": reporting.recent_results(db, user.id, limit=HISTORY_LIMIT),
        "bestCompetences": reporting.best_competences(db, user.id, limit=BEST_COMPETENCES_LIMIT),
        "summary": {
            "totalTests": stats["testsCompleted"],
            "avgPercentage": stats["avgResult"],
            "successRate": stats["successRate"]
        }
    }


@router.get("/test/{test_result_id}")
def get_profile_test_details(test_result_id: int,
                             current_user: CurrentUser = Depends(get_current_user),
                             db: Session = Depends(get_db)):
    """Compact view of one attempt for the profile page."""
    test_result = reporting.get_owned_result(db, current_user.id, test_result_id)

    return {
        "success": True,
        "testInfo": {
            "testId": test_result.id,
            "date": reporting.format_datetime(test_result.completed_at),
            "score": test_result.total_score,
            "total": test_result.total_questions,
            "percentage": float(test_result.percentage or 0),
            "completedAt": reporting.isoformat(test_result.completed_at)
        },
        "competenceResults": reporting.competence_breakdown(db, test_result.id),
        "summary": reporting.result_summary(test_result)
    }

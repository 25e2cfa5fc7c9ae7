"""
Test API route - serves the question bank to authenticated test takers.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import get_current_user
from expertcheck.services.reporting import list_questions_with_answers

router = APIRouter(prefix="/api/test", dependencies=[Depends(get_current_user)])


@router.get("/questions")
def get_test_questions(db: Session = Depends(get_db)):
    """All questions with their answer options, without correctness flags."""
    return {
        "success": True,
        "questions": list_questions_with_answers(db, include_correct=False)
    }

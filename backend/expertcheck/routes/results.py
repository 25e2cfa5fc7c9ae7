"""
Results API routes - submit a finished test and read back scored attempts.

Provides endpoints for:
- Saving a submission (scoring + persistence in one transaction)
- Listing the caller's attempts with details of the latest one
- Viewing one attempt with its competence breakdown and answer review
"""

import time
from typing import Any, List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import CurrentUser, get_current_user
from expertcheck.errors import ValidationFailed
from expertcheck.services.scoring import save_test_results
from expertcheck.services import reporting
from expertcheck.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/results")
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class AnswerGroup(BaseModel):
    """Answer ids selected for one question."""
    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(..., alias="questionId")
    answer_ids: List[int] = Field(default_factory=list, alias="answerIds")


class SaveResultsRequest(BaseModel):
    """
    Body of POST /api/results/save.

    questions echoes the questions the client displayed; only its presence
    is checked, scoring always uses the stored question bank.
    """
    answers: Optional[List[AnswerGroup]] = None
    questions: Optional[List[Any]] = None


@router.post("/save", status_code=201)
def save_results(request: SaveResultsRequest,
                 current_user: CurrentUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    """Score the submitted answers and store them as a new attempt."""
    if request.answers is None or request.questions is None:
        raise ValidationFailed("Test result data is missing")

    test_result, summary = save_test_results(
        db,
        current_user.id,
        [(group.question_id, group.answer_ids) for group in request.answers]
    )

    return {
        "success": True,
        "message": "Test results saved",
        "testResultId": test_result.id,
        "totalScore": summary.total_score,
        "totalQuestions": summary.total_questions,
        "percentage": summary.percentage
    }


@router.get("/all")
def get_user_results(current_user: CurrentUser = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    """Every attempt of the caller, plus the full breakdown of the latest one."""
    start_time = time.time()

    results = reporting.list_user_results(db, current_user.id)

    last_test_details = None
    if results:
        latest = results[0]
        last_test_details = {
            **reporting.serialize_test_result(latest),
            "competenceResults": reporting.competence_breakdown(db, latest.id),
            "questionHistory": reporting.question_history(db, latest.id)
        }

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} test results".format(len(results)),
        context={"user_id": current_user.id},
        extra_data={"duration_ms": round(duration_ms, 2)})

    return {
        "success": True,
        "testResults": [reporting.serialize_test_result(r) for r in results],
        "lastTestDetails": last_test_details
    }


@router.get("/{test_result_id}")
def get_test_details(test_result_id: int,
                     current_user: CurrentUser = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    """Full detail of one attempt owned by the caller."""
    test_result = reporting.get_owned_result(db, current_user.id, test_result_id)

    return {
        "success": True,
        "testInfo": reporting.serialize_test_result(test_result),
        "competenceResults": reporting.competence_breakdown(db, test_result.id),
        "questionHistory": reporting.question_history(db, test_result.id),
        "stats": reporting.result_summary(test_result)
    }

"""
Admin API routes - question bank management.

Every route in this module requires the admin role; the check is attached
once to the router.

Provides endpoints for:
- Dashboard counters
- Question CRUD, including a usage check before deletion
- Answer option CRUD
"""

import time
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from expertcheck.database import get_db
from expertcheck.dependencies import CurrentUser, require_admin
from expertcheck.errors import NotFound, ReferenceConflict, ValidationFailed
from expertcheck.models.user import User
from expertcheck.models.question import Question, Answer, QUESTION_TYPES, SINGLE_CHOICE
from expertcheck.models.test_result import TestResult
from expertcheck.models.user_answer import UserAnswer
from expertcheck.services.reporting import (
    list_questions_with_answers, serialize_question, serialize_answer
)
from expertcheck.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])
logger = get_logger("admin")


# ── Pydantic schemas ─────────────────────────────────────────

class QuestionCreate(BaseModel):
    question_text: Optional[str] = None
    competence: Optional[str] = None
    question_type: Optional[str] = None


class QuestionUpdate(BaseModel):
    question_text: Optional[str] = None
    competence: Optional[str] = None
    question_type: Optional[str] = None


class AnswerCreate(BaseModel):
    question_id: Optional[int] = None
    answer_text: Optional[str] = None
    is_correct: bool = False


class AnswerUpdate(BaseModel):
    answer_text: Optional[str] = None
    is_correct: Optional[bool] = None


def _check_question_type(question_type: str):
    if question_type not in QUESTION_TYPES:
        raise ValidationFailed("Unknown question type '{}', expected one of: {}".format(
            question_type, ", ".join(QUESTION_TYPES)))


def _get_question(db: Session, question_id: int) -> Question:
    question = db.get(Question, question_id)
    if not question:
        raise NotFound("Question not found")
    return question


def _get_answer(db: Session, answer_id: int) -> Answer:
    answer = db.get(Answer, answer_id)
    if not answer:
        raise NotFound("Answer not found")
    return answer


# ── Dashboard ────────────────────────────────────────────────

@router.get("/stats")
def get_admin_stats(db: Session = Depends(get_db)):
    return {
        "success": True,
        "stats": {
            "total_users": db.query(func.count(User.id)).scalar(),
            "total_questions": db.query(func.count(Question.id)).scalar(),
            "total_answers": db.query(func.count(Answer.id)).scalar(),
            "total_user_answers": db.query(func.count(UserAnswer.id)).scalar(),
            "total_test_results": db.query(func.count(TestResult.id)).scalar()
        }
    }


# ── Questions ────────────────────────────────────────────────

@router.get("/questions")
def get_all_questions(db: Session = Depends(get_db)):
    """Every question with its answers, including the correctness flags."""
    return {"success": True, "questions": list_questions_with_answers(db)}


@router.post("/questions", status_code=201)
def create_question(request: QuestionCreate,
                    admin: CurrentUser = Depends(require_admin),
                    db: Session = Depends(get_db)):
    if not (request.question_text or "").strip() or not (request.competence or "").strip():
        raise ValidationFailed("Question text and competence are required")

    question_type = request.question_type or SINGLE_CHOICE
    _check_question_type(question_type)

    question = Question(
        question_text=request.question_text.strip(),
        competence=request.competence.strip(),
        question_type=question_type,
        created_at=datetime.now(timezone.utc)
    )
    db.add(question)
    db.commit()
    db.refresh(question)

    log_with_context(logger, "INFO", "Question created",
                     context={"question_id": question.id, "admin_id": admin.id},
                     extra_data={"competence": question.competence, "type": question.question_type})

    return {
        "success": True,
        "message": "Question created",
        "question": serialize_question(question)
    }


@router.put("/questions/{question_id}")
def update_question(question_id: int, request: QuestionUpdate,
                    admin: CurrentUser = Depends(require_admin),
                    db: Session = Depends(get_db)):
    question = _get_question(db, question_id)

    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "question_type" in changes:
        _check_question_type(changes["question_type"])
    for name in ("question_text", "competence"):
        if name in changes:
            if not changes[name].strip():
                raise ValidationFailed("{} cannot be empty".format(name))
            changes[name] = changes[name].strip()

    for name, value in changes.items():
        setattr(question, name, value)
    question.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(question)

    log_with_context(logger, "INFO", "Question updated",
                     context={"question_id": question.id, "admin_id": admin.id},
                     extra_data={"fields": sorted(changes)})

    return {
        "success": True,
        "message": "Question updated",
        "question": serialize_question(question)
    }


@router.get("/questions/{question_id}/check")
def check_question_deletion(question_id: int, db: Session = Depends(get_db)):
    """How many attempts and users a question's deletion would touch."""
    _get_question(db, question_id)

    test_count = db.query(
        func.count(func.distinct(UserAnswer.test_result_id))
    ).filter(UserAnswer.question_id == question_id).scalar() or 0

    user_count = db.query(
        func.count(func.distinct(TestResult.user_id))
    ).join(
        UserAnswer, UserAnswer.test_result_id == TestResult.id
    ).filter(UserAnswer.question_id == question_id).scalar() or 0

    return {
        "success": True,
        "stats": {
            "questionId": question_id,
            "usedInTests": test_count,
            "usedByUsers": user_count,
            "canDelete": test_count == 0
        }
    }


@router.delete("/questions/{question_id}")
def delete_question(question_id: int,
                    admin: CurrentUser = Depends(require_admin),
                    db: Session = Depends(get_db)):
    """
    Delete a question together with its answers and submitted answers.

    Rows are removed child-first inside one transaction; any failure rolls
    the whole deletion back.
    """
    start_time = time.time()
    question = _get_question(db, question_id)
    question_text = question.question_text

    try:
        user_answers_deleted = db.query(UserAnswer).filter(
            UserAnswer.question_id == question_id
        ).delete(synchronize_session=False)
        answers_deleted = db.query(Answer).filter(
            Answer.question_id == question_id
        ).delete(synchronize_session=False)
        db.query(Question).filter(
            Question.id == question_id
        ).delete(synchronize_session=False)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_with_context(logger, "WARNING", "Question deletion blocked by related records",
                         context={"question_id": question_id, "admin_id": admin.id},
                         extra_data={"error": str(e.orig)})
        raise ReferenceConflict(
            "Cannot delete the question because of related records. Details: {}".format(e.orig))
    except SQLAlchemyError:
        db.rollback()
        raise

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Question deleted: {}".format(question_text[:100]),
                     context={"question_id": question_id, "admin_id": admin.id},
                     extra_data={
                         "answers_deleted": answers_deleted,
                         "user_answers_deleted": user_answers_deleted,
                         "duration_ms": round(duration_ms, 2)
                     })

    return {
        "success": True,
        "message": "Question and related data deleted (answers: {}, history records: {})".format(
            answers_deleted, user_answers_deleted),
        "stats": {
            "answersDeleted": answers_deleted,
            "userAnswersDeleted": user_answers_deleted
        }
    }


# ── Answers ──────────────────────────────────────────────────

@router.post("/answers", status_code=201)
def create_answer(request: AnswerCreate,
                  admin: CurrentUser = Depends(require_admin),
                  db: Session = Depends(get_db)):
    if request.question_id is None or not (request.answer_text or "").strip():
        raise ValidationFailed("question_id and answer_text are required")

    _get_question(db, request.question_id)

    answer = Answer(
        question_id=request.question_id,
        answer_text=request.answer_text.strip(),
        is_correct=request.is_correct,
        created_at=datetime.now(timezone.utc)
    )
    db.add(answer)
    db.commit()
    db.refresh(answer)

    log_with_context(logger, "INFO", "Answer created",
                     context={"answer_id": answer.id, "question_id": answer.question_id,
                              "admin_id": admin.id},
                     extra_data={"is_correct": answer.is_correct})

    return {"success": True, "message": "Answer added", "answer": serialize_answer(answer)}


@router.put("/answers/{answer_id}")
def update_answer(answer_id: int, request: AnswerUpdate,
                  admin: CurrentUser = Depends(require_admin),
                  db: Session = Depends(get_db)):
    answer = _get_answer(db, answer_id)

    if request.answer_text is not None:
        if not request.answer_text.strip():
            raise ValidationFailed("answer_text cannot be empty")
        answer.answer_text = request.answer_text.strip()
    if request.is_correct is not None:
        answer.is_correct = request.is_correct

    db.commit()
    db.refresh(answer)

    log_with_context(logger, "INFO", "Answer updated",
                     context={"answer_id": answer.id, "admin_id": admin.id},
                     extra_data={"is_correct": answer.is_correct})

    return {"success": True, "message": "Answer updated", "answer": serialize_answer(answer)}


@router.delete("/answers/{answer_id}")
def delete_answer(answer_id: int,
                  admin: CurrentUser = Depends(require_admin),
                  db: Session = Depends(get_db)):
    _get_answer(db, answer_id)

    try:
        db.query(Answer).filter(Answer.id == answer_id).delete(synchronize_session=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ReferenceConflict(
            "Cannot delete the answer: it was selected in saved test results")
    except SQLAlchemyError:
        db.rollback()
        raise

    log_with_context(logger, "INFO", "Answer deleted",
                     context={"answer_id": answer_id, "admin_id": admin.id})

    return {"success": True, "message": "Answer deleted"}

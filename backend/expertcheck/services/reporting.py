"""
Reporting Service - read-only views over stored questions and test results.

Shapes database rows into the structures returned by the test, results,
profile and admin endpoints:
- question bank with nested answers
- test history, per-competence breakdown and per-question review
- profile statistics and best competences across all attempts

Per-question correctness is never recomputed here: the verdict stored on
user_answers at scoring time is the only source.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from expertcheck.errors import NotFound
from expertcheck.models.question import Question, Answer
from expertcheck.models.test_result import TestResult
from expertcheck.models.competence_result import CompetenceResult
from expertcheck.models.user_answer import UserAnswer

DATE_FORMAT = "%d.%m.%Y %H:%M"
ANSWER_SEPARATOR = "; "


def format_datetime(value) -> Optional[str]:
    """Render a timestamp as DD.MM.YYYY HH:MM."""
    return value.strftime(DATE_FORMAT) if value else None


def isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


# ── Question bank ────────────────────────────────────────────

def serialize_answer(answer: Answer, include_correct: bool = True) -> dict:
    data = {
        "id": answer.id,
        "answer_text": answer.answer_text,
    }
    if include_correct:
        data["is_correct"] = bool(answer.is_correct)
        data["created_at"] = isoformat(answer.created_at)
    return data


def serialize_question(question: Question) -> dict:
    """Question fields without answers."""
    return {
        "id": question.id,
        "question_text": question.question_text,
        "competence": question.competence,
        "question_type": question.question_type,
        "created_at": isoformat(question.created_at),
        "updated_at": isoformat(question.updated_at),
    }


def list_questions_with_answers(db: Session, include_correct: bool = True) -> List[dict]:
    """
    All questions with their answers nested, ordered by id.

    Test takers get the answer options without the is_correct flags.
    """
    rows = db.query(Question, Answer).outerjoin(
        Answer, Answer.question_id == Question.id
    ).order_by(Question.id, Answer.id).all()

    questions: Dict[int, dict] = {}
    for question, answer in rows:
        entry = questions.get(question.id)
        if entry is None:
            entry = {
                "id": question.id,
                "question_text": question.question_text,
                "competence": question.competence,
                "question_type": question.question_type,
                "answers": [],
            }
            if include_correct:
                entry["created_at"] = isoformat(question.created_at)
            questions[question.id] = entry
        if answer is not None:
            entry["answers"].append(serialize_answer(answer, include_correct))

    return list(questions.values())


# ── Test results ─────────────────────────────────────────────

def serialize_test_result(test_result: TestResult) -> dict:
    return {
        "id": test_result.id,
        "total_score": test_result.total_score,
        "total_questions": test_result.total_questions,
        "percentage": float(test_result.percentage or 0),
        "completed_at": format_datetime(test_result.completed_at),
    }


def serialize_competence_result(result: CompetenceResult) -> dict:
    return {
        "competence": result.competence,
        "score": result.score,
        "total_questions": result.total_questions,
        "percentage": float(result.percentage or 0),
    }


def get_owned_result(db: Session, user_id: int, test_result_id: int) -> TestResult:
    """
    Load a test result that belongs to the given user.

    Raises:
        NotFound: If the result does not exist or belongs to someone else
    """
    test_result = db.query(TestResult).filter(
        TestResult.id == test_result_id,
        TestResult.user_id == user_id
    ).first()
    if not test_result:
        raise NotFound("Test result not found")
    return test_result


def list_user_results(db: Session, user_id: int, limit: Optional[int] = None) -> List[TestResult]:
    """A user's attempts, newest first."""
    query = db.query(TestResult).filter(
        TestResult.user_id == user_id
    ).order_by(TestResult.completed_at.desc(), TestResult.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def competence_breakdown(db: Session, test_result_id: int) -> List[dict]:
    results = db.query(CompetenceResult).filter(
        CompetenceResult.test_result_id == test_result_id
    ).order_by(CompetenceResult.competence).all()
    return [serialize_competence_result(r) for r in results]


def question_history(db: Session, test_result_id: int) -> List[dict]:
    """
    Per-question review of one attempt.

    Rows of a multiple_choice question are folded into one entry: the
    selected answer texts and all correct answer texts are each joined
    with "; ".
    """
    rows = db.query(UserAnswer).options(
        joinedload(UserAnswer.answer),
        joinedload(UserAnswer.question).selectinload(Question.answers)
    ).filter(
        UserAnswer.test_result_id == test_result_id
    ).order_by(UserAnswer.question_id, UserAnswer.answer_id).all()

    history: Dict[int, dict] = {}
    for row in rows:
        entry = history.get(row.question_id)
        if entry is None:
            question = row.question
            entry = {
                "question_id": question.id,
                "question_text": question.question_text,
                "competence": question.competence,
                "question_type": question.question_type,
                "selected": [],
                "is_correct": bool(row.is_correct),
                "correct": [a.answer_text for a in question.answers if a.is_correct],
            }
            history[row.question_id] = entry
        else:
            # every row of a question carries the same stored verdict
            entry["is_correct"] = entry["is_correct"] and bool(row.is_correct)
        if row.answer.answer_text not in entry["selected"]:
            entry["selected"].append(row.answer.answer_text)

    return [
        {
            "question_id": entry["question_id"],
            "question_text": entry["question_text"],
            "competence": entry["competence"],
            "question_type": entry["question_type"],
            "user_answers": ANSWER_SEPARATOR.join(entry["selected"]),
            "is_correct": entry["is_correct"],
            "correct_answers": ANSWER_SEPARATOR.join(entry["correct"]) or None,
        }
        for entry in history.values()
    ]


def result_summary(test_result: TestResult) -> dict:
    return {
        "totalQuestions": test_result.total_questions,
        "correctAnswers": test_result.total_score,
        "percentage": float(test_result.percentage or 0),
        "incorrectAnswers": test_result.total_questions - test_result.total_score,
    }


# ── Profile ──────────────────────────────────────────────────

def profile_stats(db: Session, user_id: int) -> dict:
    """Attempt count, average percentage and cumulative correct/total."""
    total_tests, avg_percentage, total_correct, total_questions = db.query(
        func.count(TestResult.id),
        func.coalesce(func.avg(TestResult.percentage), 0),
        func.coalesce(func.sum(TestResult.total_score), 0),
        func.coalesce(func.sum(TestResult.total_questions), 0),
    ).filter(TestResult.user_id == user_id).one()

    total_correct = int(total_correct or 0)
    total_questions = int(total_questions or 0)
    success_rate = round(total_correct / total_questions * 100, 1) if total_questions else 0.0

    return {
        "testsCompleted": int(total_tests or 0),
        "avgResult": round(float(avg_percentage or 0), 1),
        "totalCorrect": total_correct,
        "totalQuestions": total_questions,
        "successRate": success_rate,
    }


def recent_results(db: Session, user_id: int, limit: int = 10) -> List[dict]:
    """The latest attempts formatted for the profile history list."""
    return [
        {
            "id": r.id,
            "score": r.total_score,
            "total": r.total_questions,
            "percentage": float(r.percentage or 0),
            "date": format_datetime(r.completed_at),
            "dateParts": {
                "day": r.completed_at.day,
                "month": r.completed_at.strftime("%B"),
                "year": r.completed_at.year,
            } if r.completed_at else None,
        }
        for r in list_user_results(db, user_id, limit=limit)
    ]


def best_competences(db: Session, user_id: int, limit: int = 3) -> List[dict]:
    """Competences with the highest average percentage over all attempts."""
    avg_percentage = func.avg(CompetenceResult.percentage).label("avg_percentage")
    rows = db.query(
        CompetenceResult.competence,
        avg_percentage,
        func.count(CompetenceResult.id).label("times_tested"),
    ).join(
        TestResult, CompetenceResult.test_result_id == TestResult.id
    ).filter(
        TestResult.user_id == user_id
    ).group_by(
        CompetenceResult.competence
    ).order_by(
        avg_percentage.desc(), CompetenceResult.competence
    ).limit(limit).all()

    return [
        {
            "competence": row.competence,
            "avg_percentage": round(float(row.avg_percentage or 0), 1),
            "times_tested": int(row.times_tested),
        }
        for row in rows
    ]

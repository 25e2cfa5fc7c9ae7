"""
Scoring Service - scores a submitted test and persists the result.

Scoring works on a snapshot of the referenced questions:
1. Answer groups are merged per question, so a question is scored once
   no matter how many groups or answer ids reference it
2. Groups naming a question that no longer exists, or carrying no answer
   ids, are skipped
3. Each remaining question gets one verdict from the evaluator
4. Totals and per-competence (score, total) tallies are accumulated
5. percentage = round(100 * score / total, 2), or 0 when total is 0

save_test_results() then writes the attempt, one user_answers row per
selected option (each tagged with the question's verdict) and one
competence_results row per competence, in a single transaction.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Mapping, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from expertcheck.models.question import Question
from expertcheck.models.test_result import TestResult
from expertcheck.models.competence_result import CompetenceResult
from expertcheck.models.user_answer import UserAnswer
from expertcheck.services.evaluation import is_correct
from expertcheck.logging_config import get_logger, log_with_context

# Channel logger for scoring operations
logger = get_logger("scoring")


def percentage(score: int, total: int) -> float:
    """Share of correct answers in percent, rounded to 2 decimals."""
    if total <= 0:
        return 0.0
    return round(score / total * 100, 2)


@dataclass(frozen=True)
class QuestionKey:
    """What the scorer needs to know about one question."""
    id: int
    competence: str
    question_type: str
    correct_answer_ids: FrozenSet[int]
    answer_ids: FrozenSet[int] = frozenset()

    @classmethod
    def from_question(cls, question: Question) -> "QuestionKey":
        return cls(
            id=question.id,
            competence=question.competence,
            question_type=question.question_type,
            correct_answer_ids=question.correct_answer_ids,
            answer_ids=frozenset(a.id for a in question.answers),
        )


@dataclass
class CompetenceTally:
    score: int = 0
    total: int = 0

    @property
    def percentage(self) -> float:
        return percentage(self.score, self.total)


@dataclass(frozen=True)
class QuestionVerdict:
    question_id: int
    answer_ids: Tuple[int, ...]
    is_correct: bool


@dataclass
class ScoreSummary:
    total_score: int = 0
    total_questions: int = 0
    per_competence: Dict[str, CompetenceTally] = field(default_factory=dict)
    verdicts: List[QuestionVerdict] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        return percentage(self.total_score, self.total_questions)


def merge_answer_groups(answer_groups: Iterable[Tuple[int, Sequence[int]]]) -> Dict[int, List[int]]:
    """
    Collapse (question_id, answer_ids) groups into one id list per question.

    Keeps the order questions were first seen and drops repeated answer ids.
    """
    merged: Dict[int, List[int]] = {}
    for question_id, answer_ids in answer_groups:
        bucket = merged.setdefault(question_id, [])
        for answer_id in answer_ids or ():
            if answer_id not in bucket:
                bucket.append(answer_id)
    return merged


def score_answers(question_keys: Mapping[int, QuestionKey],
                  answer_groups: Iterable[Tuple[int, Sequence[int]]]) -> ScoreSummary:
    """
    Score submitted answer groups against the given questions.

    Args:
        question_keys: Scorable questions by id
        answer_groups: (question_id, answer_ids) pairs as submitted

    Returns:
        ScoreSummary with totals, per-competence tallies and one verdict
        per scored question
    """
    summary = ScoreSummary()

    for question_id, answer_ids in merge_answer_groups(answer_groups).items():
        question = question_keys.get(question_id)
        if question is None:
            log_with_context(logger, "DEBUG",
                "Skipping answer for unknown question {}".format(question_id),
                context={"question_id": question_id})
            continue
        if not answer_ids or question.answer_ids.isdisjoint(answer_ids):
            continue

        verdict = is_correct(question.question_type, question.correct_answer_ids, answer_ids)

        tally = summary.per_competence.setdefault(question.competence, CompetenceTally())
        tally.total += 1
        summary.total_questions += 1
        if verdict:
            tally.score += 1
            summary.total_score += 1

        summary.verdicts.append(QuestionVerdict(
            question_id=question_id,
            answer_ids=tuple(answer_ids),
            is_correct=verdict,
        ))

    return summary


def load_question_keys(db: Session, question_ids: Iterable[int]) -> Dict[int, QuestionKey]:
    """Fetch the referenced questions with their answers in one round trip."""
    ids = set(question_ids)
    if not ids:
        return {}
    questions = db.query(Question).options(
        selectinload(Question.answers)
    ).filter(Question.id.in_(ids)).all()
    return {q.id: QuestionKey.from_question(q) for q in questions}


def save_test_results(db: Session, user_id: int,
                      answer_groups: Sequence[Tuple[int, Sequence[int]]]) -> Tuple[TestResult, ScoreSummary]:
    """
    Score a submission and persist it as a new test attempt.

    Submitted ids that are not options of their question still count
    against the verdict but are not stored as user_answers rows. A group
    with no option of its question at all is not scored, so every scored
    question keeps at least one stored row.

    Returns:
        The stored TestResult and the ScoreSummary it was built from
    """
    start_time = time.time()

    answer_groups = list(answer_groups)
    question_keys = load_question_keys(db, (question_id for question_id, _ in answer_groups))
    summary = score_answers(question_keys, answer_groups)

    try:
        test_result = TestResult(
            user_id=user_id,
            total_questions=summary.total_questions,
            total_score=summary.total_score,
            percentage=summary.percentage,
            completed_at=datetime.now(timezone.utc),
        )
        db.add(test_result)
        db.flush()

        stored_answers = 0
        for verdict in summary.verdicts:
            options = question_keys[verdict.question_id].answer_ids
            for answer_id in verdict.answer_ids:
                if answer_id not in options:
                    continue
                db.add(UserAnswer(
                    test_result_id=test_result.id,
                    question_id=verdict.question_id,
                    answer_id=answer_id,
                    is_correct=verdict.is_correct,
                ))
                stored_answers += 1

        for competence, tally in summary.per_competence.items():
            db.add(CompetenceResult(
                test_result_id=test_result.id,
                competence=competence,
                score=tally.score,
                total_questions=tally.total,
                percentage=tally.percentage,
            ))

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(test_result)

    duration_ms = (time.time() - start_time) * 1000
    skipped = len(merge_answer_groups(answer_groups)) - summary.total_questions
    log_with_context(logger, "INFO",
        "Test scored: {}/{} ({:.2f}%)".format(
            summary.total_score, summary.total_questions, summary.percentage),
        context={
            "user_id": user_id,
            "test_result_id": test_result.id
        },
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "competences": len(summary.per_competence),
            "answers_stored": stored_answers,
            "groups_skipped": skipped
        })

    return test_result, summary

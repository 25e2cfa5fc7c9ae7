"""
Question and Answer models - the question bank authored by administrators.

Each question belongs to one competence (a free-form skill label) and is
either single_choice or multiple_choice. Answers carry an is_correct flag;
for single_choice exactly one answer is expected to be correct, although
that is not enforced here.
"""

from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, Integer, Text, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from expertcheck.database import Base

SINGLE_CHOICE = "single_choice"
MULTIPLE_CHOICE = "multiple_choice"
QUESTION_TYPES = (SINGLE_CHOICE, MULTIPLE_CHOICE)


class Question(Base):
    """SQLAlchemy model for the questions table."""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique question identifier")
    question_text = Column(Text, nullable=False,
                           doc="Question body shown to the test taker")
    competence = Column(String(255), nullable=False,
                        doc="Competence label used to group sub-scores")
    question_type = Column(String(20), nullable=False, default=SINGLE_CHOICE,
                           doc="single_choice | multiple_choice")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=True,
                        doc="Set whenever an administrator edits the question")

    answers = relationship("Answer", back_populates="question",
                           order_by="Answer.id")
    user_answers = relationship("UserAnswer", back_populates="question")

    __table_args__ = (
        Index("ix_questions_competence", "competence"),
    )

    @property
    def correct_answer_ids(self):
        """Ids of all answers flagged correct."""
        return frozenset(a.id for a in self.answers if a.is_correct)

    def __repr__(self):
        return f"<Question(id={self.id}, competence='{self.competence}', type='{self.question_type}')>"


class Answer(Base):
    """SQLAlchemy model for the answers table."""
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique answer identifier")
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False,
                         doc="Question this answer option belongs to")
    answer_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    question = relationship("Question", back_populates="answers")

    __table_args__ = (
        Index("ix_answers_question_id", "question_id"),
    )

    def __repr__(self):
        return f"<Answer(id={self.id}, question={self.question_id}, correct={self.is_correct})>"

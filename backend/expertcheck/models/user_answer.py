"""
UserAnswer model - one answer option selected during a test attempt.

A multiple_choice question produces one row per selected option. Every row
of a question carries the same is_correct value: the verdict computed for
the whole question when the attempt was scored.
"""

from sqlalchemy import Boolean, Column, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from expertcheck.database import Base


class UserAnswer(Base):
    """SQLAlchemy model for the user_answers table."""
    __tablename__ = "user_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_result_id = Column(Integer, ForeignKey("test_results.id"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    answer_id = Column(Integer, ForeignKey("answers.id"), nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False,
                        doc="Question-level verdict for this attempt")

    test_result = relationship("TestResult", back_populates="user_answers")
    question = relationship("Question", back_populates="user_answers")
    answer = relationship("Answer")

    __table_args__ = (
        Index("ix_user_answers_test_result_id", "test_result_id"),
        Index("ix_user_answers_question_id", "question_id"),
    )

    def __repr__(self):
        return f"<UserAnswer(test_result={self.test_result_id}, question={self.question_id}, answer={self.answer_id})>"

"""
TestResult model - one completed test attempt by one user.

Holds the aggregate score; the per-competence breakdown lives in
competence_results and the raw submitted answers in user_answers.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from expertcheck.database import Base


class TestResult(Base):
    """
    SQLAlchemy model for the test_results table.

    percentage is stored redundantly: 100 * total_score / total_questions,
    rounded to 2 decimals, 0 when no question was scored.
    """
    __tablename__ = "test_results"
    # keep pytest from collecting this class
    __test__ = False

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False,
                     doc="User who took the test")
    total_questions = Column(Integer, nullable=False, default=0)
    total_score = Column(Integer, nullable=False, default=0,
                         doc="Number of questions answered correctly")
    percentage = Column(Float, nullable=False, default=0)
    completed_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="test_results")
    competence_results = relationship("CompetenceResult", back_populates="test_result",
                                      order_by="CompetenceResult.competence")
    user_answers = relationship("UserAnswer", back_populates="test_result",
                                order_by="UserAnswer.id")

    __table_args__ = (
        Index("ix_test_results_user_id", "user_id"),
        Index("ix_test_results_completed_at", "completed_at"),
    )

    def __repr__(self):
        return f"<TestResult(id={self.id}, user={self.user_id}, score={self.total_score}/{self.total_questions})>"

"""
CompetenceResult model - sub-score of one competence within one attempt.
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from expertcheck.database import Base


class CompetenceResult(Base):
    """One row per distinct competence touched by a test attempt."""
    __tablename__ = "competence_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_result_id = Column(Integer, ForeignKey("test_results.id"), nullable=False)
    competence = Column(String(255), nullable=False)
    score = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0)

    test_result = relationship("TestResult", back_populates="competence_results")

    __table_args__ = (
        Index("ix_competence_results_test_result_id", "test_result_id"),
    )

    def __repr__(self):
        return f"<CompetenceResult(test_result={self.test_result_id}, competence='{self.competence}', {self.score}/{self.total_questions})>"

from expertcheck.models.user import User
from expertcheck.models.question import Question, Answer
from expertcheck.models.test_result import TestResult
from expertcheck.models.competence_result import CompetenceResult
from expertcheck.models.user_answer import UserAnswer

__all__ = ["User", "Question", "Answer", "TestResult", "CompetenceResult", "UserAnswer"]

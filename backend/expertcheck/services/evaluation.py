"""
Answer correctness - decides whether the answer ids submitted for one
question are correct.

- single_choice: exactly one correct answer exists, exactly one answer was
  submitted, and they are the same answer.
- multiple_choice: the submitted set equals the correct set. Subsets and
  supersets are wrong; there is no partial credit.

A question with no correct answers can never be answered correctly.
"""

from typing import Iterable

from expertcheck.models.question import SINGLE_CHOICE, MULTIPLE_CHOICE


def is_correct(question_type: str, correct_answer_ids: Iterable[int],
               submitted_answer_ids: Iterable[int]) -> bool:
    """Return the verdict for one question. Order of ids does not matter."""
    correct = frozenset(correct_answer_ids)
    submitted = frozenset(submitted_answer_ids)

    if question_type == SINGLE_CHOICE:
        return len(correct) == 1 and len(submitted) == 1 and correct == submitted

    if question_type == MULTIPLE_CHOICE:
        return len(correct) > 0 and submitted == correct

    return False

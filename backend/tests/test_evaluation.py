"""Tests for the per-question correctness verdict."""

import pytest

from expertcheck.models.question import SINGLE_CHOICE, MULTIPLE_CHOICE
from expertcheck.services.evaluation import is_correct


class TestSingleChoice:

    def test_matching_single_answer_is_correct(self):
        assert is_correct(SINGLE_CHOICE, {5}, [5]) is True

    @pytest.mark.parametrize("submitted", [[3], [4], [3, 5], [5, 4], [42]])
    def test_any_other_submission_is_wrong(self, submitted):
        assert is_correct(SINGLE_CHOICE, {5}, submitted) is False

    def test_question_with_two_correct_answers_never_matches(self):
        assert is_correct(SINGLE_CHOICE, {1, 2}, [1]) is False
        assert is_correct(SINGLE_CHOICE, {1, 2}, [1, 2]) is False

    def test_question_without_correct_answer_never_matches(self):
        assert is_correct(SINGLE_CHOICE, set(), [1]) is False
        assert is_correct(SINGLE_CHOICE, set(), []) is False

    def test_repeated_id_counts_once(self):
        assert is_correct(SINGLE_CHOICE, {5}, [5, 5]) is True


class TestMultipleChoice:

    def test_exact_set_is_correct_in_any_order(self):
        assert is_correct(MULTIPLE_CHOICE, {2, 3}, [3, 2]) is True
        assert is_correct(MULTIPLE_CHOICE, {2, 3}, [2, 3]) is True

    def test_proper_subset_is_wrong(self):
        assert is_correct(MULTIPLE_CHOICE, {2, 3}, [2]) is False

    def test_superset_is_wrong(self):
        assert is_correct(MULTIPLE_CHOICE, {2, 3}, [2, 3, 4]) is False

    def test_disjoint_set_is_wrong(self):
        assert is_correct(MULTIPLE_CHOICE, {2, 3}, [4, 5]) is False

    def test_single_correct_answer_behaves_like_set_equality(self):
        assert is_correct(MULTIPLE_CHOICE, {7}, [7]) is True
        assert is_correct(MULTIPLE_CHOICE, {7}, [7, 8]) is False

    def test_question_without_correct_answer_never_matches(self):
        assert is_correct(MULTIPLE_CHOICE, set(), [1]) is False
        assert is_correct(MULTIPLE_CHOICE, set(), []) is False


def test_unknown_question_type_is_never_correct():
    assert is_correct("free_text", {1}, [1]) is False


def test_verdict_is_stable_across_calls():
    args = (MULTIPLE_CHOICE, frozenset({2, 3}), (3, 2))
    verdicts = {is_correct(*args) for _ in range(5)}
    assert verdicts == {True}


def test_inputs_are_not_mutated():
    correct, submitted = {2, 3}, [3, 2]
    is_correct(MULTIPLE_CHOICE, correct, submitted)
    assert correct == {2, 3}
    assert submitted == [3, 2]

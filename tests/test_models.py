"""
Unit tests for the data models.
"""

import pytest
from answer_evaluator.models import (
    EvaluationOptions,
    EvaluationResult,
    Question,
    QuestionKind,
    ScoreBreakdown,
)


class TestQuestionKind:
    """Tests for resolving raw type tags."""

    @pytest.mark.parametrize("tag,kind", [
        ("offene_frage", QuestionKind.FREE_TEXT),
        ("definition", QuestionKind.DEFINITION),
        ("rechenaufgabe", QuestionKind.CALCULATION),
        ("bildbasierte_frage", QuestionKind.IMAGE_BASED),
        ("mc_radio", QuestionKind.SINGLE_CHOICE),
        ("mc_check", QuestionKind.MULTI_CHOICE),
        ("multiple_choice", QuestionKind.SINGLE_CHOICE),
        ("RECHENAUFGABE", QuestionKind.CALCULATION),
    ])
    def test_known_tags(self, tag, kind):
        assert QuestionKind.from_tag(tag) is kind

    def test_unknown_tag_is_free_text(self):
        assert QuestionKind.from_tag("essay") is QuestionKind.FREE_TEXT
        assert QuestionKind.from_tag(None) is QuestionKind.FREE_TEXT

    def test_options_imply_single_choice(self):
        assert QuestionKind.from_tag("offene_frage", has_options=True) is QuestionKind.SINGLE_CHOICE

    def test_choice_tag_wins_over_options(self):
        assert QuestionKind.from_tag("mc_check", has_options=True) is QuestionKind.MULTI_CHOICE

    def test_calculation_tag_wins_over_options(self):
        assert QuestionKind.from_tag("rechenaufgabe", has_options=True) is QuestionKind.CALCULATION
        assert Question.from_dict({"type": "calculation", "options": ["1", "2"]}).kind is QuestionKind.CALCULATION

    def test_is_choice(self):
        assert QuestionKind.SINGLE_CHOICE.is_choice
        assert QuestionKind.MULTI_CHOICE.is_choice
        assert not QuestionKind.CALCULATION.is_choice


class TestQuestionFromDict:
    """Tests for building questions from raw question-bank entries."""

    def test_defaults(self):
        q = Question.from_dict({})
        assert q.id == "Q_1"
        assert q.topic == "General"
        assert q.type == "offene_frage"
        assert q.kind is QuestionKind.FREE_TEXT
        assert q.given_answer == ""
        assert q.math_blocks == ()
        assert q.source == "Unknown"
        assert q.difficulty == "medium"
        assert q.verified is False

    def test_default_id_is_used_only_when_missing(self):
        assert Question.from_dict({}, default_id="Q_7").id == "Q_7"
        assert Question.from_dict({"id": "X"}, default_id="Q_7").id == "X"

    def test_malformed_list_fields_become_empty(self):
        q = Question.from_dict({"math_blocks": "x^2", "options": None, "correct_options": 3})
        assert q.math_blocks == ()
        assert q.options == ()
        assert q.correct_options == ()

    def test_list_fields_are_tuples_of_strings(self):
        q = Question.from_dict({"type": "mc_radio", "options": ["Yes", 2], "correct_options": ["A"]})
        assert q.options == ("Yes", "2")
        assert q.correct_options == ("A",)
        assert q.is_choice

    def test_questions_are_immutable(self):
        q = Question.from_dict({"id": "Q_1"})
        with pytest.raises(AttributeError):
            q.topic = "Other"


class TestEvaluationOptions:
    """Tests for evaluation options."""

    def test_defaults(self):
        opts = EvaluationOptions()
        assert opts.weights == {"keywords": 0.4, "jaccard": 0.3, "math": 0.2, "length": 0.1}
        assert opts.min_answer_length == 10
        assert opts.mode is None

    def test_camel_case_aliases(self):
        opts = EvaluationOptions.from_dict({"keywordWeight": 1.0, "minAnswerLength": 3, "mode": "multiple_choice"})
        assert opts.keyword_weight == 1.0
        assert opts.min_answer_length == 3
        assert opts.mode == "multiple_choice"

    def test_snake_case_and_unknown_keys(self):
        opts = EvaluationOptions.from_dict({"jaccard_weight": 0.5, "colour": "blue"})
        assert opts.jaccard_weight == 0.5
        assert opts.keyword_weight == 0.4

    def test_none_gives_defaults(self):
        assert EvaluationOptions.from_dict(None) == EvaluationOptions()


class TestEvaluationResult:

    def test_to_dict_is_plain(self):
        result = EvaluationResult(score=0.5, breakdown=ScoreBreakdown(keywords=0.5))
        data = result.to_dict()
        assert data["breakdown"] == {"keywords": 0.5, "jaccard": 0.0, "math": 0.0, "length": 0.0}
        assert data["numerical"] is None
        assert data["label"] == "insufficient"

"""
Unit tests for session statistics and report export.
"""

import json

import pytest
from answer_evaluator.evaluator import AnswerEvaluator
from answer_evaluator.models import AnswerRecord, EvaluationResult, QuestionKind, ScoreBreakdown
from answer_evaluator.report import SessionReport, sanitize_for_json
from answer_evaluator.utils import load_answers, load_questions


@pytest.fixture
def graded_records(question_bank, answer_sheet):
    """Q_att correct (exam), Q_radio wrong (exam), Q_calc correct (learn)."""
    questions = load_questions(question_bank)
    answers = load_answers(answer_sheet)
    return AnswerEvaluator().grade_session(questions, answers, verbose=False)


def make_record(qid, score, keywords, jaccard=0.5, topic="Embeddings"):
    breakdown = ScoreBreakdown(keywords=keywords, jaccard=jaccard, math=1.0, length=1.0)
    return AnswerRecord(
        question_id=qid,
        topic=topic,
        kind=QuestionKind.FREE_TEXT,
        user_answer="some answer text",
        score=score,
        correct=score >= 0.6,
        evaluation=EvaluationResult(score=score, breakdown=breakdown),
    )


class TestStatistics:
    """Tests for aggregate session statistics."""

    def test_empty_session(self):
        s = SessionReport([], total_questions=5).statistics()
        assert s.total_questions == 5
        assert s.answered_questions == 0
        assert s.average_score == 0.0
        assert s.accuracy == 0.0

    def test_graded_session(self, graded_records):
        s = SessionReport(graded_records).statistics()
        assert s.total_questions == 3
        assert s.answered_questions == 3
        assert s.correct_answers == 2
        assert s.average_score == pytest.approx(2 / 3)
        assert s.accuracy == pytest.approx(2 / 3)
        assert s.time_spent == pytest.approx(35.0)


class TestBreakdowns:
    """Tests for per-topic, per-kind and per-mode tables."""

    def test_topic_breakdown(self, graded_records):
        topics = SessionReport(graded_records).topic_breakdown()
        assert list(topics["topic"]) == ["BERT", "Evaluation", "Transformer/Attention"]
        assert list(topics["count"]) == [1, 1, 1]
        assert list(topics["accuracy"]) == [0.0, 1.0, 1.0]

    def test_kind_breakdown(self, graded_records):
        kinds = SessionReport(graded_records).kind_breakdown()
        assert list(kinds["kind"]) == ["calculation", "free_text", "single_choice"]

    def test_mode_breakdown(self, graded_records):
        modes = SessionReport(graded_records).mode_breakdown().set_index("mode")
        assert modes.loc["exam", "count"] == 2
        assert modes.loc["exam", "correct"] == 1
        assert modes.loc["learn", "accuracy"] == 1.0

    def test_empty_breakdown_has_columns(self):
        topics = SessionReport([]).topic_breakdown()
        assert topics.empty
        assert list(topics.columns) == ["topic", "count", "correct", "accuracy", "mean_score"]


class TestComponentCorrelations:

    def test_too_few_free_text_answers(self, graded_records):
        assert SessionReport(graded_records).component_correlations() == {}

    def test_constant_components_are_skipped(self):
        records = [
            make_record("Q_1", 0.2, keywords=0.1),
            make_record("Q_2", 0.5, keywords=0.5),
            make_record("Q_3", 0.8, keywords=0.9),
        ]
        corr = SessionReport(records).component_correlations()
        assert set(corr) == {"keywords"}
        assert corr["keywords"]["rho"] == pytest.approx(1.0)


class TestExport:
    """Tests for JSON export and saving."""

    def test_sanitize_for_json(self):
        data = sanitize_for_json({"kind": QuestionKind.CALCULATION, "values": (1, float("nan"))})
        assert data == {"kind": "calculation", "values": [1, None]}

    def test_to_dict_is_json_safe(self, graded_records):
        data = SessionReport(graded_records).to_dict()
        text = json.dumps(data)
        assert '"calculation"' in text
        assert data["statistics"]["correct_answers"] == 2
        assert [r["question_id"] for r in data["results"]] == ["Q_att", "Q_radio", "Q_calc"]
        calc = data["results"][2]["evaluation"]["numerical"]
        assert calc["score"] == 1.0

    def test_save_without_plots(self, graded_records, tmp_path):
        path = SessionReport(graded_records).save(str(tmp_path / "out"), plots=False)
        with open(path, encoding="utf-8") as f:
            saved = json.load(f)
        assert saved["statistics"]["answered_questions"] == 3
        assert not (tmp_path / "out" / "topic_scores.png").exists()

    def test_save_with_plots(self, graded_records, tmp_path):
        SessionReport(graded_records).save(str(tmp_path), plots=True)
        assert (tmp_path / "session_report.json").exists()
        assert (tmp_path / "topic_scores.png").exists()
        assert (tmp_path / "score_distribution.png").exists()
        assert (tmp_path / "component_heatmap.png").exists()

    def test_save_empty_session(self, tmp_path):
        SessionReport([]).save(str(tmp_path))
        assert (tmp_path / "session_report.json").exists()
        assert not (tmp_path / "topic_scores.png").exists()

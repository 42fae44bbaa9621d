import json
import os
import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import answer_evaluator without installing
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

# plots are written to files only
os.environ.setdefault("MPLBACKEND", "Agg")

from answer_evaluator.models import Question


@pytest.fixture
def attention_question():
    """Free-text question without math blocks."""
    return Question.from_dict({
        "id": "Q_att",
        "topic": "Transformer/Attention",
        "type": "offene_frage",
        "question_text": "How does attention work?",
        "given_answer": "Attention uses Query Key Value matrices and softmax scaling",
    })


@pytest.fixture
def radio_question():
    return Question.from_dict({
        "id": "Q_radio",
        "topic": "BERT",
        "type": "mc_radio",
        "question_text": "Is BERT bidirectional?",
        "options": ["Yes", "No"],
        "correct_options": ["A"],
    })


@pytest.fixture
def check_question():
    return Question.from_dict({
        "id": "Q_check",
        "topic": "Embeddings",
        "type": "mc_check",
        "question_text": "Which are static embeddings?",
        "options": ["word2vec", "BERT", "GloVe"],
        "correct_options": ["A", "C"],
    })


@pytest.fixture
def calculation_question():
    return Question.from_dict({
        "id": "Q_calc",
        "topic": "Evaluation",
        "type": "rechenaufgabe",
        "question_text": "Compute the values.",
        "given_answer": "The result is 42.5 and 3",
    })


@pytest.fixture
def question_bank(tmp_path: Path):
    """Question bank file in the bundled format."""
    data = {
        "exam_questions": [
            {
                "id": "Q_att",
                "topic": "Transformer/Attention",
                "type": "offene_frage",
                "given_answer": "Attention uses Query Key Value matrices and softmax scaling",
            },
            {
                "id": "Q_radio",
                "topic": "BERT",
                "type": "mc_radio",
                "options": ["Yes", "No"],
                "correct_options": ["A"],
            },
            {
                "id": "Q_calc",
                "topic": "Evaluation",
                "type": "rechenaufgabe",
                "given_answer": "The result is 42.5 and 3",
            },
            {
                "topic": "Embeddings",
                "given_answer": "Embeddings map tokens to dense vectors",
            },
        ]
    }
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def answer_sheet(tmp_path: Path):
    data = [
        {
            "question_id": "Q_att",
            "answer": "Attention uses Query Key Value matrices and softmax scaling",
            "mode": "exam",
            "time_spent": 30,
        },
        {"question_id": "Q_radio", "answer": "B", "mode": "exam", "time_spent": 5},
        {"question_id": "Q_calc", "answer": "I got 42.6 and 3", "mode": "learn", "hints_used": 1},
        {"question_id": "Q_missing", "answer": "no such question"},
    ]
    path = tmp_path / "answers.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path

"""Utilities for loading question banks and answer sheets."""

import json
from typing import Dict, List, Optional
from answer_evaluator.models import Question


def parse_question_from_dict(data: Dict, position: int = 1) -> Optional[Question]:
    """Parse a question from its question-bank dictionary.

    Args:
        data: Dictionary with question fields (topic, type, given_answer, ...)
        position: 1-based position in the bank, used for a missing id

    Returns:
        Question object or None if the entry is not a dictionary
    """
    if not isinstance(data, dict):
        return None
    return Question.from_dict(data, default_id=f"Q_{position}")


def load_questions(file_path: str) -> List[Question]:
    """Load a question bank.

    Accepts the bundled format ``{"exam_questions": [...]}`` or a bare list.

    Args:
        file_path: Path to JSON question file

    Returns:
        List of Question objects
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        raw_data = json.load(f)

    if isinstance(raw_data, dict):
        raw_data = raw_data.get('exam_questions')
    if not isinstance(raw_data, list):
        raise ValueError(f"Invalid question file {file_path}: exam_questions array missing")

    questions = []
    for i, entry in enumerate(raw_data):
        q = parse_question_from_dict(entry, position=i + 1)
        if q:
            questions.append(q)
    return questions


def load_answers(file_path: str) -> List[Dict]:
    """Load an answer sheet.

    Either a list of ``{"question_id", "answer", "mode", "hints_used",
    "time_spent"}`` entries or an object mapping question ids to answers.

    Args:
        file_path: Path to JSON answer file

    Returns:
        List of answer entries
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        raw_data = json.load(f)

    if isinstance(raw_data, dict):
        return [{'question_id': str(qid), 'answer': answer} for qid, answer in raw_data.items()]
    if not isinstance(raw_data, list):
        raise ValueError(f"Invalid answer file {file_path}: expected a list or an object")

    return [entry for entry in raw_data if isinstance(entry, dict) and 'question_id' in entry]

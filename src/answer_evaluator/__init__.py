"""Answer Evaluator - heuristic grading of free-text NLP exam answers."""

__version__ = "0.1.0"

from answer_evaluator.models import (
    QuestionKind,
    Question,
    ScoreBreakdown,
    EvaluationOptions,
    EvaluationResult,
    NumberMatch,
    NumericalEvaluation,
    AnswerRecord,
    SessionStatistics,
)
from answer_evaluator.text import (
    tokenize,
    remove_stopwords,
    stem,
    process_text,
    extract_keywords,
    extract_math_terms,
    jaccard_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    normalize_score,
    format_score,
    get_score_color,
    get_score_label,
    analyze_text,
)
from answer_evaluator.evaluator import (
    AnswerEvaluator,
    CORRECT_THRESHOLD,
    evaluate_answer,
    evaluate_numerical_answer,
    generate_hint,
    grade_answer,
)
from answer_evaluator.report import SessionReport
from answer_evaluator.utils import parse_question_from_dict, load_questions, load_answers

__all__ = [
    "QuestionKind",
    "Question",
    "ScoreBreakdown",
    "EvaluationOptions",
    "EvaluationResult",
    "NumberMatch",
    "NumericalEvaluation",
    "AnswerRecord",
    "SessionStatistics",
    "tokenize",
    "remove_stopwords",
    "stem",
    "process_text",
    "extract_keywords",
    "extract_math_terms",
    "jaccard_similarity",
    "levenshtein_distance",
    "levenshtein_similarity",
    "normalize_score",
    "format_score",
    "get_score_color",
    "get_score_label",
    "analyze_text",
    "AnswerEvaluator",
    "CORRECT_THRESHOLD",
    "evaluate_answer",
    "evaluate_numerical_answer",
    "generate_hint",
    "grade_answer",
    "SessionReport",
    "parse_question_from_dict",
    "load_questions",
    "load_answers",
]

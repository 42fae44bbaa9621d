"""Data models for answer evaluation."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Optional, Tuple


class QuestionKind(str, Enum):
    """Question variant, resolved once from the raw ``type`` tag."""

    FREE_TEXT = "free_text"
    DEFINITION = "definition"
    CALCULATION = "calculation"
    IMAGE_BASED = "image_based"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"

    @classmethod
    def from_tag(cls, tag: Optional[str], has_options: bool = False) -> "QuestionKind":
        """Map a raw question-bank type tag to a kind.

        Questions that carry answer options but no choice tag are graded
        as single-select questions, except calculations, which keep their
        numeric check.
        """
        t = (tag or "").strip().lower()
        kind = _KIND_TAGS.get(t, cls.FREE_TEXT)
        if kind is cls.CALCULATION:
            return kind
        if t == "mc_check":
            return cls.MULTI_CHOICE
        if t.startswith("mc_") or t == "multiple_choice":
            return cls.SINGLE_CHOICE
        if has_options:
            return cls.SINGLE_CHOICE
        return kind

    @property
    def is_choice(self) -> bool:
        return self in (QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE)


_KIND_TAGS = {
    "offene_frage": QuestionKind.FREE_TEXT,
    "free_text": QuestionKind.FREE_TEXT,
    "definition": QuestionKind.DEFINITION,
    "rechenaufgabe": QuestionKind.CALCULATION,
    "calculation": QuestionKind.CALCULATION,
    "numeric": QuestionKind.CALCULATION,
    "bildbasierte_frage": QuestionKind.IMAGE_BASED,
    "image_based": QuestionKind.IMAGE_BASED,
}


def _str_tuple(value) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class Question:
    """A question-bank entry. Read-only for the evaluator."""

    id: str
    topic: str = "General"
    type: str = "offene_frage"
    kind: QuestionKind = QuestionKind.FREE_TEXT
    question_text: str = ""
    given_answer: str = ""
    math_blocks: Tuple[str, ...] = ()
    options: Tuple[str, ...] = ()
    correct_options: Tuple[str, ...] = ()
    notes: str = ""
    source: str = "Unknown"
    difficulty: str = "medium"
    verified: bool = False

    @property
    def is_choice(self) -> bool:
        return self.kind.is_choice

    @classmethod
    def from_dict(cls, data: Dict, default_id: str = "Q_1") -> "Question":
        """Build a question from a raw dict, filling in defaults."""
        options = _str_tuple(data.get("options"))
        raw_type = data.get("type") or "offene_frage"
        return cls(
            id=str(data.get("id") or default_id),
            topic=str(data.get("topic") or "General"),
            type=str(raw_type),
            kind=QuestionKind.from_tag(str(raw_type), has_options=bool(options)),
            question_text=str(data.get("question_text") or ""),
            given_answer=str(data.get("given_answer") or ""),
            math_blocks=_str_tuple(data.get("math_blocks")),
            options=options,
            correct_options=_str_tuple(data.get("correct_options")),
            notes=str(data.get("notes") or ""),
            source=str(data.get("source") or "Unknown"),
            difficulty=str(data.get("difficulty") or "medium"),
            verified=bool(data.get("verified")),
        )


@dataclass
class ScoreBreakdown:
    """Per-component sub-scores, each in [0, 1]."""

    keywords: float = 0.0
    jaccard: float = 0.0
    math: float = 0.0
    length: float = 0.0


# camelCase names used by the browser front end
_OPTION_ALIASES = {
    "keywordWeight": "keyword_weight",
    "jaccardWeight": "jaccard_weight",
    "mathWeight": "math_weight",
    "lengthWeight": "length_weight",
    "minAnswerLength": "min_answer_length",
}


@dataclass
class EvaluationOptions:
    """Weights and thresholds for free-text scoring."""

    keyword_weight: float = 0.4
    jaccard_weight: float = 0.3
    math_weight: float = 0.2
    length_weight: float = 0.1
    min_answer_length: int = 10
    mode: Optional[str] = None  # "multiple_choice" forces the choice path

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "EvaluationOptions":
        kwargs = {}
        for key, value in (data or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                kwargs[name] = value
        return cls(**kwargs)

    @property
    def weights(self) -> Dict[str, float]:
        return {
            "keywords": self.keyword_weight,
            "jaccard": self.jaccard_weight,
            "math": self.math_weight,
            "length": self.length_weight,
        }


@dataclass
class NumberMatch:
    expected: float
    found: float


@dataclass
class NumericalEvaluation:
    """Result of comparing the numbers in an answer with the expected ones."""

    score: float
    feedback: str
    matched_numbers: List[NumberMatch] = field(default_factory=list)
    missing_numbers: List[float] = field(default_factory=list)


@dataclass
class EvaluationResult:
    """Outcome of grading one answer."""

    score: float
    breakdown: ScoreBreakdown
    matched_keywords: List[str] = field(default_factory=list)
    missing_keywords: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    color: str = "red"
    label: str = "insufficient"
    feedback: str = ""
    diagnostics: Dict = field(default_factory=dict)
    numerical: Optional[NumericalEvaluation] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class AnswerRecord:
    """A graded answer within a study session."""

    question_id: str
    topic: str
    kind: QuestionKind
    user_answer: str
    score: float
    correct: bool
    evaluation: EvaluationResult
    mode: str = "learn"
    hints_used: int = 0
    time_spent: float = 0.0


@dataclass
class SessionStatistics:
    total_questions: int = 0
    answered_questions: int = 0
    average_score: float = 0.0
    correct_answers: int = 0
    time_spent: float = 0.0
    accuracy: float = 0.0

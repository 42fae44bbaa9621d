"""
Heuristic grading of free-text exam answers.

A candidate answer is compared with the question's reference answer along
four components, blended into one composite score:

1) Keywords (0.4)
   - Up to 12 stemmed keywords of the reference answer are looked up among
     the 15 strongest keywords of the user answer.
   - Exact hits earn a full point, near-misses (Levenshtein similarity > 0.8)
     earn 0.8.

2) Jaccard (0.3)
   - Token-set overlap of the stopword-filtered, stemmed texts.

3) Math terms (0.2)
   - Share of the reference's LaTeX commands, inline formulas and NLP/ML
     jargon (plus the question's math blocks) that the user mentions.

4) Length (0.1)
   - Banded ratio of answer length to reference length.

Choice questions bypass all of this and are graded by exact selection.
Calculation questions additionally get a numeric comparison, and the
better of the two scores counts.
"""

import re
from typing import Dict, List, Optional, Sequence, Union

from answer_evaluator.models import (
    AnswerRecord,
    EvaluationOptions,
    EvaluationResult,
    NumberMatch,
    NumericalEvaluation,
    Question,
    QuestionKind,
    ScoreBreakdown,
)
from answer_evaluator.text import (
    extract_keywords,
    extract_math_terms,
    format_score,
    get_score_color,
    get_score_label,
    jaccard_similarity,
    levenshtein_similarity,
    normalize_score,
    process_text,
)

# answers at or above this score count as correct in session statistics
CORRECT_THRESHOLD = 0.6

FUZZY_MATCH_THRESHOLD = 0.8
FUZZY_MATCH_CREDIT = 0.8

NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
CORRECT_OPTIONS_PATTERN = re.compile(r"Correct\s*:\s*([A-Z](?:\s*,\s*[A-Z])*)", re.IGNORECASE)

QuestionLike = Union[Question, Dict]
OptionsLike = Union[EvaluationOptions, Dict, None]


def _as_question(question: Optional[QuestionLike]) -> Question:
    if question is None:
        raise ValueError("question is required")
    if isinstance(question, Question):
        return question
    if isinstance(question, dict):
        return Question.from_dict(question)
    raise ValueError(f"unsupported question type: {type(question).__name__}")


def _as_options(options: OptionsLike) -> EvaluationOptions:
    if isinstance(options, EvaluationOptions):
        return options
    return EvaluationOptions.from_dict(options)


def extract_numbers(text: str) -> List[float]:
    """All numeric literals in text, scientific notation included."""
    return [float(literal) for literal in NUMBER_PATTERN.findall(text or "")]


# =============================================================================
# AnswerEvaluator
# =============================================================================

class AnswerEvaluator:
    """
    Grades answers against a question's reference answer.

    The evaluator holds only configuration (weights, thresholds, hint
    tables); every call works on its arguments alone, so one instance can
    be shared freely.
    """
    def __init__(self, options: OptionsLike = None):
        self.options = _as_options(options)

        self.reference_keyword_count = 12
        self.user_keyword_count = 15
        self.hint_term_count = 6

        # (ratio_low, ratio_high, score), checked in order
        self.length_bands = [
            (0.5, 1.5, 1.0),
            (0.3, 2.0, 0.8),
            (0.2, 3.0, 0.6),
        ]
        self.length_floor = 0.3

        self.topic_hints = [
            ("Transformer/Attention", "Think of the three matrices Q, K, V and the softmax mechanism."),
            ("Embeddings", "Consider word vectors, dimensionality and similarity measures."),
            ("Sentiment Analysis", "Consider classification vs. regression, aspects vs. documents."),
            ("BERT", "Masked language modeling and bidirectional context are central."),
            ("Bias", "Template-based tests and statistical significance matter."),
            ("Evaluation", "Metrics, baselines and robustness should be mentioned."),
        ]

    # ----------------- entry points -----------------

    def evaluate(self, user_answer: str, question: QuestionLike, options: OptionsLike = None) -> EvaluationResult:
        """Grade one answer. ``options`` overrides the evaluator's defaults."""
        question = _as_question(question)
        opts = self.options if options is None else _as_options(options)

        if opts.mode == "multiple_choice" or question.is_choice:
            return self.evaluate_choice(user_answer, question)

        if not user_answer or len(user_answer.strip()) < opts.min_answer_length:
            return self._too_short_result()

        reference = question.given_answer

        user_tokens = process_text(user_answer, use_stemming=True)
        answer_tokens = process_text(reference, use_stemming=True)

        answer_keywords = extract_keywords(reference, self.reference_keyword_count)
        user_keywords = extract_keywords(user_answer, self.user_keyword_count)

        answer_math_terms = extract_math_terms(reference)
        user_math_terms = extract_math_terms(user_answer)
        for block in question.math_blocks:
            answer_math_terms.extend(extract_math_terms(block))

        breakdown = ScoreBreakdown(
            keywords=self.score_keywords(user_keywords, answer_keywords),
            jaccard=jaccard_similarity(user_tokens, answer_tokens),
            math=self.score_math(user_math_terms, answer_math_terms),
            length=self.score_length(user_answer, reference),
        )

        weights = opts.weights
        total = normalize_score(
            breakdown.keywords * weights["keywords"]
            + breakdown.jaccard * weights["jaccard"]
            + breakdown.math * weights["math"]
            + breakdown.length * weights["length"]
        )

        matched, missing = self.match_keywords(user_keywords, answer_keywords)

        return EvaluationResult(
            score=total,
            breakdown=breakdown,
            matched_keywords=matched,
            missing_keywords=missing,
            suggestions=self.generate_suggestions(breakdown, missing, question),
            color=get_score_color(total),
            label=get_score_label(total),
            feedback=self.generate_feedback(total, breakdown, matched, missing),
            diagnostics={
                "user_tokens": user_tokens,
                "answer_tokens": answer_tokens,
                "user_keywords": user_keywords,
                "answer_keywords": answer_keywords,
                "user_math_terms": user_math_terms,
                "answer_math_terms": answer_math_terms,
            },
        )

    def grade(self, user_answer: str, question: QuestionLike, options: OptionsLike = None) -> EvaluationResult:
        """Grade an answer the way a study session does.

        Calculation questions keep the better of the free-text and numeric
        scores; everything else is graded by ``evaluate``.
        """
        question = _as_question(question)
        opts = self.options if options is None else _as_options(options)

        result = self.evaluate(user_answer, question, opts)
        if question.kind is QuestionKind.CALCULATION:
            numerical = self.evaluate_numerical(user_answer, question.given_answer)
            result.numerical = numerical
            if numerical.score > result.score:
                result.score = numerical.score
                result.color = get_score_color(result.score)
                result.label = get_score_label(result.score)
                result.feedback = self.generate_feedback(
                    result.score, result.breakdown, result.matched_keywords, result.missing_keywords
                )
                result.suggestions = self.numeric_suggestions(numerical)
            result.feedback = f"{result.feedback.rstrip()}\n\n**Numeric check:** {numerical.feedback}\n"
        return result

    def grade_session(
        self,
        questions: Sequence[Question],
        answers: Sequence[Dict],
        verbose: bool = True,
    ) -> List[AnswerRecord]:
        """Grade an answer sheet against a question bank."""
        by_id = {q.id: q for q in questions}
        records = []

        for entry in answers:
            qid = str(entry.get("question_id", ""))
            question = by_id.get(qid)
            if question is None:
                if verbose:
                    print(f"  ⚠ Unknown question id '{qid}' - skipped")
                continue

            user_answer = str(entry.get("answer") or "")
            result = self.grade(user_answer, question)
            records.append(
                AnswerRecord(
                    question_id=qid,
                    topic=question.topic,
                    kind=question.kind,
                    user_answer=user_answer,
                    score=result.score,
                    correct=result.score >= CORRECT_THRESHOLD,
                    evaluation=result,
                    mode=str(entry.get("mode") or "learn"),
                    hints_used=int(entry.get("hints_used") or 0),
                    time_spent=float(entry.get("time_spent") or 0.0),
                )
            )
            if verbose:
                print(f"  ✓ {qid}: {format_score(result.score)} ({result.label})")

        return records

    # ----------------- choice questions -----------------

    @staticmethod
    def correct_options_for(question: Question) -> List[str]:
        """Correct choice letters, from the structured field or legacy text."""
        if question.correct_options:
            return [str(v).upper() for v in question.correct_options]

        # legacy data: "Correct: B" / "Correct: B, C" inside the reference text
        match = CORRECT_OPTIONS_PATTERN.search(question.given_answer)
        if match:
            return [s.upper() for s in re.split(r"\s*,\s*", match.group(1))]
        return []

    def evaluate_choice(self, user_answer: str, question: Question) -> EvaluationResult:
        correct = self.correct_options_for(question)
        selection = [s.upper() for s in re.split(r"[\s,;]+", user_answer or "") if s]

        correct_set = set(correct)
        if question.kind is QuestionKind.MULTI_CHOICE:
            is_correct = correct_set == set(selection)
        else:
            is_correct = len(selection) == 1 and selection[0] in correct_set

        return EvaluationResult(
            score=1.0 if is_correct else 0.0,
            breakdown=ScoreBreakdown(),
            suggestions=[] if is_correct else ["Wrong selection. Please try again."],
            color="green" if is_correct else "red",
            label="correct" if is_correct else "incorrect",
            feedback="Correct selection." if is_correct else f"Correct: {', '.join(correct)}",
            diagnostics={"selection": selection, "correct": correct},
        )

    @staticmethod
    def _too_short_result() -> EvaluationResult:
        return EvaluationResult(
            score=0.0,
            breakdown=ScoreBreakdown(),
            suggestions=["Answer too short. Please answer in more detail."],
            color="red",
            label="insufficient",
            feedback="The answer is too short or empty.",
            diagnostics={
                "user_tokens": [],
                "answer_tokens": [],
                "user_keywords": [],
                "answer_keywords": [],
            },
        )

    # ----------------- component scores -----------------

    @staticmethod
    def _fuzzy_match(keyword: str, candidates: Sequence[str]) -> bool:
        return any(levenshtein_similarity(c, keyword) > FUZZY_MATCH_THRESHOLD for c in candidates)

    def score_keywords(self, user_keywords: Sequence[str], answer_keywords: Sequence[str]) -> float:
        if not answer_keywords:
            return 1.0

        user_set = set(user_keywords)
        points = 0.0
        for keyword in answer_keywords:
            if keyword in user_set:
                points += 1.0
            elif self._fuzzy_match(keyword, user_keywords):
                points += FUZZY_MATCH_CREDIT
        return normalize_score(points / len(answer_keywords))

    @staticmethod
    def score_math(user_terms: Sequence[str], answer_terms: Sequence[str]) -> float:
        if not answer_terms:
            return 1.0  # no math expected

        user_set = {t.lower() for t in user_terms}
        answer_set = {t.lower() for t in answer_terms}
        return normalize_score(len(user_set & answer_set) / len(answer_set))

    def score_length(self, user_answer: str, reference: str) -> float:
        user_len = len((user_answer or "").strip())
        ref_len = len((reference or "").strip())
        if ref_len == 0:
            return 1.0

        ratio = user_len / ref_len
        for low, high, score in self.length_bands:
            if low <= ratio <= high:
                return score
        return self.length_floor

    def match_keywords(self, user_keywords: Sequence[str], answer_keywords: Sequence[str]):
        """Split reference keywords into (matched, missing)."""
        matched, missing = [], []
        for keyword in answer_keywords:
            if keyword in user_keywords or self._fuzzy_match(keyword, user_keywords):
                matched.append(keyword)
            else:
                missing.append(keyword)
        return matched, missing

    # ----------------- feedback & suggestions -----------------

    @staticmethod
    def generate_feedback(
        total: float,
        breakdown: ScoreBreakdown,
        matched: Sequence[str],
        missing: Sequence[str],
    ) -> str:
        lines = [
            f"Overall: {format_score(total)} ({get_score_label(total)})",
            "",
            "**Score breakdown:**",
            f"• Keywords: {format_score(breakdown.keywords)} ({len(matched)} found)",
            f"• Content similarity: {format_score(breakdown.jaccard)}",
            f"• Mathematical terms: {format_score(breakdown.math)}",
            f"• Answer length: {format_score(breakdown.length)}",
            "",
        ]

        if matched:
            lines += [f"**Recognised key terms:** {', '.join(matched)}", ""]

        if missing:
            line = f"**Missing important terms:** {', '.join(missing[:5])}"
            if len(missing) > 5:
                line += f" (and {len(missing) - 5} more)"
            lines += [line, ""]

        return "\n".join(lines) + "\n"

    def generate_suggestions(
        self,
        breakdown: ScoreBreakdown,
        missing_keywords: Sequence[str],
        question: Question,
    ) -> List[str]:
        suggestions = []

        if breakdown.keywords < 0.6:
            suggestions.append(f'Use more technical terms from the topic "{question.topic}".')
            if missing_keywords:
                suggestions.append(f"Important missing terms: {', '.join(missing_keywords[:3])}")

        if breakdown.jaccard < 0.5:
            suggestions.append("Elaborate on the central concepts.")

        if breakdown.math < 0.6 and question.math_blocks:
            suggestions.append("Refer explicitly to the mathematical formulas.")

        if breakdown.length < 0.5:
            suggestions.append("Develop your answer in more detail.")

        suggestions.extend(self.topic_suggestions(question.topic, breakdown))
        return suggestions

    @staticmethod
    def topic_suggestions(topic: str, breakdown: ScoreBreakdown) -> List[str]:
        topic = topic or ""
        suggestions = []

        if "Transformer" in topic or "Attention" in topic:
            if breakdown.math < 0.7:
                suggestions.append("Explain the mathematical steps: Q, K, V, attention score, softmax.")
            suggestions.append("Mention the role of scaling (√d_k) and self-attention.")

        if "Embeddings" in topic:
            suggestions.append("Describe the difference between the kinds of embeddings.")
            suggestions.append("Explain dimensionality and training procedures.")

        if "Sentiment" in topic:
            suggestions.append("Distinguish aspect-based from document-level sentiment.")
            suggestions.append("Mention evaluation metrics and typical challenges.")

        if "Bias" in topic or "Evaluation" in topic:
            suggestions.append("Describe concrete measurement and test procedures.")
            suggestions.append("Mention statistical significance and robustness.")

        return suggestions

    @staticmethod
    def numeric_suggestions(numerical: NumericalEvaluation) -> List[str]:
        if not numerical.missing_numbers:
            return []
        values = ", ".join(f"{n:g}" for n in numerical.missing_numbers)
        return [f"Check your calculation, these values are missing or off: {values}"]

    # ----------------- hints -----------------

    def generate_hint(self, question: QuestionLike, level: int) -> str:
        """Escalating hints: 1 topic, 2 structure, 3 vocabulary."""
        question = _as_question(question)
        if level == 1:
            return self._topic_hint(question)
        if level == 2:
            return self._structure_hint(question)
        if level == 3:
            return self._keyword_hint(question)
        return "No further hints available."

    def _topic_hint(self, question: Question) -> str:
        for key, hint in self.topic_hints:
            if key in question.topic:
                return f"💡 **Topic hint:** {hint}"

        notes = question.notes or "Think about the fundamental concepts of this area."
        return f'💡 **Topic hint:** This is a question about "{question.topic}". {notes}'

    @staticmethod
    def _structure_hint(question: Question) -> str:
        answer = question.given_answer

        items = (
            re.findall(r"^\d+\.\s+[^.]+", answer, re.MULTILINE)
            or re.findall(r"^[-•*]\s+[^.]+", answer, re.MULTILINE)
            or re.findall(r"\*\*[^*]+\*\*:", answer)
        )
        if len(items) > 1:
            steps = [
                re.sub(r"\*\*|^\d+\.\s*|^[-•*]\s*", "", item).split(":")[0]
                for item in items[:3]
            ]
            return f"🔄 **Structure hint:** Proceed step by step: {' → '.join(steps)}"

        first_sentence = re.split(r"[.!?]\s+", answer)[0]
        if len(first_sentence) > 20:
            opening = first_sentence.replace("**", "")[:100] + "..."
            return f'🔄 **Structure hint:** Start with: "{opening}"'

        return "🔄 **Structure hint:** Organise your answer into logical sections and explain each step."

    def _keyword_hint(self, question: Question) -> str:
        keywords = extract_keywords(question.given_answer, self.hint_term_count)
        math_terms = extract_math_terms(question.given_answer)
        terms = list(dict.fromkeys(keywords + math_terms))[:self.hint_term_count]

        hint = f"🔑 **Keyword hint:** Important terms: {', '.join(terms)}"
        if question.math_blocks:
            hint += "\n\n📐 **Math hint:** Take the given formulas into account."
        return hint

    # ----------------- numeric answers -----------------

    @staticmethod
    def evaluate_numerical(user_answer: str, expected_answer: str, tolerance: float = 0.05) -> NumericalEvaluation:
        """Compare the numbers in an answer with those of the expected answer.

        Args:
            user_answer: Answer text
            expected_answer: Reference text containing the expected numbers
            tolerance: Relative tolerance per number

        Returns:
            NumericalEvaluation with score = matched / expected
        """
        user_numbers = extract_numbers(user_answer)
        expected_numbers = extract_numbers(expected_answer)

        if not user_numbers:
            return NumericalEvaluation(
                score=0.0,
                feedback="No numeric values found in the answer.",
                missing_numbers=list(expected_numbers),
            )

        matched = []
        missing = list(expected_numbers)
        for expected in expected_numbers:
            found = next((u for u in user_numbers if abs(u - expected) <= abs(expected * tolerance)), None)
            if found is not None:
                matched.append(NumberMatch(expected=expected, found=found))
                missing.remove(expected)

        score = len(matched) / len(expected_numbers) if expected_numbers else 0.0
        return NumericalEvaluation(
            score=score,
            feedback=f"{len(matched)} of {len(expected_numbers)} numbers correct.",
            matched_numbers=matched,
            missing_numbers=missing,
        )


# =============================================================================
# Functional API
# =============================================================================

_DEFAULT_EVALUATOR = AnswerEvaluator()


def evaluate_answer(user_answer: str, question: QuestionLike, options: OptionsLike = None) -> EvaluationResult:
    return _DEFAULT_EVALUATOR.evaluate(user_answer, question, options)


def evaluate_numerical_answer(user_answer: str, expected_answer: str, tolerance: float = 0.05) -> NumericalEvaluation:
    return AnswerEvaluator.evaluate_numerical(user_answer, expected_answer, tolerance)


def generate_hint(question: QuestionLike, level: int) -> str:
    return _DEFAULT_EVALUATOR.generate_hint(question, level)


def grade_answer(user_answer: str, question: QuestionLike, options: OptionsLike = None) -> EvaluationResult:
    return _DEFAULT_EVALUATOR.grade(user_answer, question, options)
